"""Page-layout rules for character pages.

The wiki has no semantic ids, so every field is found by position: a header
row tagged with the file name of its icon image, nth-child indices into the
card tables, and sibling-row distances. All of that knowledge lives here as
plain data; ``dokkandata.extract`` interprets it.
"""

from dataclasses import dataclass

# Readers: how to get text once a section header icon is located
NEXT_ROW = "next_row"
NEXT_ROW_OR_FOLLOWING = "next_row_or_following"
CONDITION = "condition"
CENTERED_NEXT_ROW = "centered_next_row"

# Rows searched past the active skill text for its activation condition
CONDITION_HOPS = 3

# Section header icons
LEADER_SKILL = "Leader Skill.png"
SUPER_ATTACK = "Super atk.png"
ULTRA_SUPER_ATTACK = "Ultra Super atk.png"
PASSIVE_SKILL = "Passive skill.png"
ACTIVE_SKILL = "Active skill.png"
ACTIVATION_CONDITION = "Activation Condition.png"
TRANSFORMATION_CONDITION = "Transformation Condition.png"
LINK_SKILL = "Link skill.png"
CATEGORY = "Category.png"
KI_METER = "Ki meter.png"

# Card table (identity block)
CARD_TABLE = ".mw-parser-output table"
NAME_CELL = "> tbody > tr > td:nth-child(2)"
LEVEL_CELL = "> tbody > tr:nth-child(3) > td"
SA_LEVEL_CELL = "> tbody > tr:nth-child(3) > td:nth-child(2) > center"
RARITY_LINK = "> tbody > tr:nth-child(3) > td:nth-child(3) > center a"
CLASS_TYPE_LINK = "> tbody > tr:nth-child(3) > td:nth-child(4) > center a"
COST_CELL = "> tbody > tr:nth-child(3) > td:nth-child(5) > center:nth-child(1)"
ID_CELL = "> tbody > tr:nth-child(3) > td:nth-child(6) > center:nth-child(1)"
TRANSFORMED_ID_CELL = "> tbody > tr:nth-child(3) > td:nth-child(6)"
IMAGE_CANDIDATES = (
    ("> tbody > tr > td > div > img", "src"),
    ("> tbody > tr > td > a", "href"),
    ("> tbody > tr > td > img", "src"),
)

# Right-hand stats card
RIGHT_CARD = ".righttablecard"
STAT_CELL = (
    ".righttablecard > table:nth-child(3) > tbody:nth-child(1)"
    " > tr:nth-child({row}) > td:nth-child({column}) > center:nth-child(1)"
)
KI_MULTIPLIER_CELL = (
    ".righttablecard > table:nth-child(6) > tbody:nth-child(1)"
    " > tr:nth-child(2) > td:nth-child(1)"
)
KI_MULTIPLIER_FALLBACK = "tr:nth-child(2) > td"
KI_ARROW = "► "
KI_LEVELS = (12, 18, 24)

# attribute -> (row, column); rows HP=2 Attack=3 Defence=4,
# columns base=2 max level=3 free dupe=4 rainbow=5
STAT_FIELDS = {
    "base_hp": (2, 2),
    "max_level_hp": (2, 3),
    "free_dupe_hp": (2, 4),
    "rainbow_hp": (2, 5),
    "base_attack": (3, 2),
    "max_level_attack": (3, 3),
    "free_dupe_attack": (3, 4),
    "rainbow_attack": (3, 5),
    "base_defence": (4, 2),
    "max_defence": (4, 3),
    "free_dupe_defence": (4, 4),
    "rainbow_defence": (4, 5),
}

# Alternate forms: tab list under the forms container, one panel per tab
FORMS_CONTAINER = ".mw-parser-output > div:nth-child(2)"
FORM_TABS = f"{FORMS_CONTAINER} > div > ul > li"

EZA_TABLES = "table.ezawidth"
EZA_TABLE_INDEX = 1
SEZA_TABLE_INDEX = 2


def form_scope(index: int) -> str:
    """Selector root of the panel for form tab ``index`` (tab 0 is the base form)."""
    return f"{FORMS_CONTAINER} > div:nth-child({index + 2})"


@dataclass(frozen=True)
class Locator:
    """One candidate position for a skill section.

    ``selector`` may contain ``{icon}``, replaced with the header's
    ``[data-image-name=...]`` selector. With ``index`` set, the selector
    picks tables and the icon is searched inside ``tables[index]``. With
    ``direct`` set, the first match is the text cell itself.
    """

    selector: str
    index: int | None = None
    direct: bool = False


@dataclass(frozen=True)
class SkillRule:
    icon: str
    locators: tuple[Locator, ...]
    read: str = NEXT_ROW
    passive: bool = False
    required: bool = False


def _tab_panel(n: int) -> Locator:
    return Locator(
        ".righttablecard > table > tbody > tr > td > div > div"
        f" > div:nth-child({n}) {{icon}}"
    )


BASE = (Locator("{icon}"),)
SEZA = (
    Locator(EZA_TABLES, index=SEZA_TABLE_INDEX),
    Locator(".super-eza {icon}"),
)


def _eza(*extra: Locator) -> tuple[Locator, ...]:
    return (
        *extra,
        Locator(EZA_TABLES, index=EZA_TABLE_INDEX),
        Locator(".ezawidth {icon}"),
    )


_EZA_LEADER_CELL = Locator(
    ".ezatabber > div > div:nth-child(3) > table > tbody > tr:nth-child(2) > td",
    direct=True,
)
_FORM_EZA = (_tab_panel(3), Locator(".ezawidth {icon}"))
_FORM_SEZA = (_tab_panel(4), Locator(".super-eza {icon}"))

# Character attribute -> rule
CHARACTER_SKILLS = {
    "leader_skill": SkillRule(LEADER_SKILL, BASE, required=True),
    "eza_leader_skill": SkillRule(LEADER_SKILL, _eza(_EZA_LEADER_CELL)),
    "seza_leader_skill": SkillRule(LEADER_SKILL, SEZA),
    "super_attack": SkillRule(SUPER_ATTACK, BASE, required=True),
    "eza_super_attack": SkillRule(SUPER_ATTACK, _eza()),
    "seza_super_attack": SkillRule(SUPER_ATTACK, SEZA),
    "ultra_super_attack": SkillRule(ULTRA_SUPER_ATTACK, BASE),
    "eza_ultra_super_attack": SkillRule(ULTRA_SUPER_ATTACK, _eza(_tab_panel(3))),
    "seza_ultra_super_attack": SkillRule(ULTRA_SUPER_ATTACK, SEZA),
    "passive": SkillRule(PASSIVE_SKILL, BASE, passive=True, required=True),
    "eza_passive": SkillRule(PASSIVE_SKILL, _eza(), passive=True),
    "seza_passive": SkillRule(PASSIVE_SKILL, SEZA, passive=True),
    "active_skill": SkillRule(ACTIVE_SKILL, BASE, read=NEXT_ROW_OR_FOLLOWING),
    "active_skill_condition": SkillRule(ACTIVE_SKILL, BASE, read=CONDITION),
    "eza_active_skill": SkillRule(ACTIVE_SKILL, _eza()),
    "eza_active_skill_condition": SkillRule(ACTIVE_SKILL, _eza(), read=CONDITION),
    "seza_active_skill": SkillRule(ACTIVE_SKILL, SEZA),
    "seza_active_skill_condition": SkillRule(ACTIVE_SKILL, SEZA, read=CONDITION),
    "transformation_condition": SkillRule(
        TRANSFORMATION_CONDITION, BASE, read=CENTERED_NEXT_ROW,
    ),
}

# Transformation attribute -> rule, evaluated under form_scope(index)
TRANSFORMATION_SKILLS = {
    "transformed_super_attack": SkillRule(SUPER_ATTACK, BASE, required=True),
    "transformed_eza_super_attack": SkillRule(SUPER_ATTACK, _FORM_EZA),
    "transformed_seza_super_attack": SkillRule(SUPER_ATTACK, _FORM_SEZA),
    "transformed_ultra_super_attack": SkillRule(ULTRA_SUPER_ATTACK, BASE),
    "transformed_eza_ultra_super_attack": SkillRule(ULTRA_SUPER_ATTACK, _FORM_EZA),
    "transformed_seza_ultra_super_attack": SkillRule(ULTRA_SUPER_ATTACK, _FORM_SEZA),
    "transformed_passive": SkillRule(
        PASSIVE_SKILL, BASE, passive=True, required=True,
    ),
    "transformed_eza_passive": SkillRule(PASSIVE_SKILL, _FORM_EZA, passive=True),
    "transformed_seza_passive": SkillRule(PASSIVE_SKILL, _FORM_SEZA, passive=True),
    "transformed_active_skill": SkillRule(ACTIVE_SKILL, BASE),
    "transformed_active_skill_condition": SkillRule(ACTIVATION_CONDITION, BASE),
}
