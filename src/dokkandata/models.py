"""Data models."""

from dataclasses import dataclass, field, fields

ERROR = "Error"

RARITIES = ("N", "R", "SR", "SSR", "UR", "LR")
CLASSES = ("Super", "Extreme")
TYPES = ("PHY", "STR", "AGL", "TEQ", "INT")

DEFAULT_RARITY = "UR"
DEFAULT_CLASS = "Super"
DEFAULT_TYPE = "PHY"

# Name tokens rendered upper-case in JSON keys (except as the first token)
_ACRONYMS = {"hp", "id", "sa", "url", "eza", "seza"}
_KEY_OVERRIDES = {"card_class": "class", "card_type": "type"}


def json_key(name: str) -> str:
    """Map a snake_case attribute name to its camelCase record key."""
    if name in _KEY_OVERRIDES:
        return _KEY_OVERRIDES[name]
    head, *rest = name.split("_")
    return head + "".join(
        part.upper() if part in _ACRONYMS else part.capitalize()
        for part in rest
    )


def _to_dict(record) -> dict:
    """Serialize a record, omitting absent (None) optional fields."""
    out = {}
    for f in fields(record):
        value = getattr(record, f.name)
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
        out[json_key(f.name)] = value
    return out


@dataclass(frozen=True)
class Transformation:
    transformed_id: str
    transformed_name: str
    transformed_class: str  # Super / Extreme
    transformed_type: str  # PHY / STR / AGL / TEQ / INT
    transformed_super_attack: str
    transformed_passive: str
    transformed_links: tuple[str, ...]
    transformed_image_url: str
    transformed_full_image_url: str
    transformed_eza_super_attack: str | None = None
    transformed_seza_super_attack: str | None = None
    transformed_ultra_super_attack: str | None = None
    transformed_eza_ultra_super_attack: str | None = None
    transformed_seza_ultra_super_attack: str | None = None
    transformed_eza_passive: str | None = None
    transformed_seza_passive: str | None = None
    transformed_active_skill: str | None = None
    transformed_active_skill_condition: str | None = None

    def to_dict(self) -> dict:
        return _to_dict(self)


@dataclass(frozen=True)
class Character:
    name: str
    title: str
    max_level: int
    max_sa_level: str
    rarity: str  # N / R / SR / SSR / UR / LR
    card_class: str  # Super / Extreme
    card_type: str  # PHY / STR / AGL / TEQ / INT
    cost: int
    id: str
    image_url: str
    full_image_url: str
    leader_skill: str
    super_attack: str
    passive: str
    links: tuple[str, ...]
    categories: tuple[str, ...]
    ki_meter: tuple[str, ...]
    base_hp: int
    max_level_hp: int
    free_dupe_hp: int
    rainbow_hp: int
    base_attack: int
    max_level_attack: int
    free_dupe_attack: int
    rainbow_attack: int
    base_defence: int
    max_defence: int
    free_dupe_defence: int
    rainbow_defence: int
    ki_multiplier: str
    eza_leader_skill: str | None = None
    seza_leader_skill: str | None = None
    eza_super_attack: str | None = None
    seza_super_attack: str | None = None
    ultra_super_attack: str | None = None
    eza_ultra_super_attack: str | None = None
    seza_ultra_super_attack: str | None = None
    eza_passive: str | None = None
    seza_passive: str | None = None
    active_skill: str | None = None
    active_skill_condition: str | None = None
    eza_active_skill: str | None = None
    eza_active_skill_condition: str | None = None
    seza_active_skill: str | None = None
    seza_active_skill_condition: str | None = None
    transformation_condition: str | None = None
    ki12_multiplier: str | None = None
    ki18_multiplier: str | None = None
    ki24_multiplier: str | None = None
    transformations: tuple[Transformation, ...] | None = None

    def to_dict(self) -> dict:
        return _to_dict(self)


@dataclass
class ScrapeError:
    url: str
    error: str
    timestamp: str  # ISO format
    attempt: int

    def to_dict(self) -> dict:
        return _to_dict(self)


@dataclass
class ScrapeStats:
    total_characters: int = 0
    processing_time: float = 0.0  # seconds
    categories_processed: list[str] = field(default_factory=list)
    errors: list[ScrapeError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return _to_dict(self)
