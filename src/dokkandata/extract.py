"""Field extractors for character pages.

Each extractor is a pure function of a parsed document (plus an optional
card-table root or scope selector for transformation panels) returning one
field. Missing structure never raises: required fields come back as
``"Error"``, optional ones as ``None``.
"""

import logging
import re

from bs4 import BeautifulSoup, Tag

from dokkandata import rules
from dokkandata.markup import (
    attr_of,
    closest,
    find_by_image_name,
    image_selector,
    inner_html_of,
    next_sibling_of,
    select_all,
    select_first,
    text_of,
    texts_of,
)
from dokkandata.models import (
    CLASSES,
    DEFAULT_CLASS,
    DEFAULT_RARITY,
    DEFAULT_TYPE,
    ERROR,
    RARITIES,
    TYPES,
)
from dokkandata.rules import Locator, SkillRule
from dokkandata.text import (
    clean_passive_text,
    extract_name,
    extract_title,
    full_image_url,
    safe_parse_int,
)

logger = logging.getLogger(__name__)

_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)
_SA_MULTIPLIER_LINK = re.compile(
    r'<a\b[^>]*href="/wiki/Super_Attack_Multipliers"[^>]*>(.*?)</a>',
    re.IGNORECASE | re.DOTALL,
)


def _scoped(scope: str, selector: str) -> str:
    return f"{scope} {selector}" if scope else selector


# ---------------------------------------------------------------------------
# Readers: header icon -> section text
# ---------------------------------------------------------------------------

def _read_next_row(header: Tag) -> str | None:
    row = next_sibling_of(closest(header, "tr"))
    return text_of(row, "") or None


def _read_next_row_or_following(header: Tag) -> str | None:
    row = next_sibling_of(closest(header, "tr"))
    text = text_of(row, "")
    if not text:
        text = text_of(next_sibling_of(row), "")
    return text or None


def _read_condition(header: Tag) -> str | None:
    """First ``td > center`` within CONDITION_HOPS rows after the skill text."""
    row = next_sibling_of(closest(header, "tr"))
    for _ in range(rules.CONDITION_HOPS):
        if row is None:
            break
        row = next_sibling_of(row)
        text = text_of(select_first(row, "td > center"), "")
        if text:
            return text
    return None


def _read_centered_next_row(header: Tag) -> str | None:
    row = next_sibling_of(closest(header, "tr"))
    return text_of(select_first(row, "td > center"), "") or None


_READERS = {
    rules.NEXT_ROW: _read_next_row,
    rules.NEXT_ROW_OR_FOLLOWING: _read_next_row_or_following,
    rules.CONDITION: _read_condition,
    rules.CENTERED_NEXT_ROW: _read_centered_next_row,
}


# ---------------------------------------------------------------------------
# Skill sections
# ---------------------------------------------------------------------------

def _locate(
    soup: BeautifulSoup, rule: SkillRule, locator: Locator, scope: str,
) -> str | None:
    selector = _scoped(
        scope, locator.selector.replace("{icon}", image_selector(rule.icon)),
    )
    if locator.direct:
        return text_of(select_first(soup, selector), "") or None

    if locator.index is not None:
        tables = select_all(soup, selector)
        if not tables or len(tables) <= locator.index:
            return None
        header = find_by_image_name(tables[locator.index], rule.icon)
    else:
        header = select_first(soup, selector)

    if header is None:
        return None
    return _READERS[rule.read](header)


def resolve_skill(
    soup: BeautifulSoup, rule: SkillRule, scope: str = "",
) -> str | None:
    """Text of the first locator that exists and reads non-empty, or None."""
    for locator in rule.locators:
        text = _locate(soup, rule, locator, scope)
        if not text:
            continue
        if rule.passive:
            text = clean_passive_text(text)
            if text == ERROR:
                continue
        return text
    return None


def skill(soup: BeautifulSoup, rule: SkillRule, scope: str = "") -> str | None:
    """Skill text collapsed to the record contract ("Error" or None)."""
    text = resolve_skill(soup, rule, scope)
    if text is None and rule.required:
        return ERROR
    return text


# ---------------------------------------------------------------------------
# Card identity
# ---------------------------------------------------------------------------

def _card_cell(soup: BeautifulSoup, card: str, cell: str) -> Tag | None:
    return select_first(soup, f"{card} {cell}")


def card_name(soup: BeautifulSoup, card: str = rules.CARD_TABLE) -> str:
    return extract_name(inner_html_of(_card_cell(soup, card, rules.NAME_CELL)))


def card_title(soup: BeautifulSoup, card: str = rules.CARD_TABLE) -> str:
    return extract_title(inner_html_of(_card_cell(soup, card, rules.NAME_CELL)))


def max_level(soup: BeautifulSoup, card: str = rules.CARD_TABLE) -> int:
    """Level cap from "1/140"-style text."""
    parts = text_of(_card_cell(soup, card, rules.LEVEL_CELL)).split("/")
    level = parts[1] if len(parts) > 1 and parts[1] else parts[0]
    return safe_parse_int(level)


def max_sa_level(soup: BeautifulSoup, card: str = rules.CARD_TABLE) -> str:
    cell = _card_cell(soup, card, rules.SA_LEVEL_CELL)
    text = text_of(cell)
    parts = text.split("/")
    if len(parts) > 1 and parts[1].strip():
        return parts[1].strip()
    html_parts = inner_html_of(cell).split(">/")
    if len(html_parts) > 1 and html_parts[1].strip():
        return html_parts[1].strip()
    return text.strip() or ERROR


def _category_title(soup: BeautifulSoup, card: str, cell: str) -> list[str]:
    """Words after "Category:" in a link title, e.g. ["Super", "AGL"]."""
    title = attr_of(_card_cell(soup, card, cell), "title")
    parts = title.split("Category:", 1)
    if len(parts) < 2:
        return []
    return parts[1].split(" ")


def rarity(soup: BeautifulSoup, card: str = rules.CARD_TABLE) -> str:
    words = _category_title(soup, card, rules.RARITY_LINK)
    value = words[0] if words else ""
    return value if value in RARITIES else DEFAULT_RARITY


def card_class(soup: BeautifulSoup, card: str = rules.CARD_TABLE) -> str:
    words = _category_title(soup, card, rules.CLASS_TYPE_LINK)
    value = words[0] if words else ""
    return value if value in CLASSES else DEFAULT_CLASS


def card_type(soup: BeautifulSoup, card: str = rules.CARD_TABLE) -> str:
    words = _category_title(soup, card, rules.CLASS_TYPE_LINK)
    value = words[1] if len(words) > 1 else ""
    return value if value in TYPES else DEFAULT_TYPE


def cost(soup: BeautifulSoup, card: str = rules.CARD_TABLE) -> int:
    return safe_parse_int(text_of(_card_cell(soup, card, rules.COST_CELL)))


def card_id(
    soup: BeautifulSoup,
    card: str = rules.CARD_TABLE,
    cell: str = rules.ID_CELL,
) -> str:
    return text_of(_card_cell(soup, card, cell)) or ERROR


def image_url(soup: BeautifulSoup, card: str = rules.CARD_TABLE) -> str:
    """Thumbnail URL: div > img src, then a href, then bare img src."""
    for cell, attribute in rules.IMAGE_CANDIDATES:
        value = attr_of(_card_cell(soup, card, cell), attribute, "")
        if value:
            return value
    return ERROR


def full_image(soup: BeautifulSoup, card: str = rules.CARD_TABLE) -> str:
    return full_image_url(image_url(soup, card))


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

def _section_items(
    soup: BeautifulSoup, icon: str, items: str, scope: str,
) -> list[str]:
    header = select_first(soup, _scoped(scope, image_selector(icon)))
    if header is None:
        return [ERROR]
    row = next_sibling_of(closest(header, "tr"))
    return texts_of(select_all(row, items))


def link_skills(soup: BeautifulSoup, scope: str = "") -> list[str]:
    return _section_items(soup, rules.LINK_SKILL, "span > a", scope)


def categories(soup: BeautifulSoup, scope: str = "") -> list[str]:
    return _section_items(soup, rules.CATEGORY, "a", scope)


def ki_meter(soup: BeautifulSoup) -> list[str]:
    """Ki sphere icon names in the ki meter block.

    The first icon of the block is the fixed starting sphere and is dropped.
    """
    header = find_by_image_name(soup, rules.KI_METER)
    if header is None:
        return [ERROR]
    icons = select_all(closest(header, "tbody"), "img")
    if not icons:
        return [ERROR]
    values = [attr_of(img, "alt").split(".png")[0] for img in icons][1:]
    return values or [ERROR]


# ---------------------------------------------------------------------------
# Stats and multipliers
# ---------------------------------------------------------------------------

def stat(soup: BeautifulSoup, row: int, column: int) -> int:
    cell = select_first(soup, rules.STAT_CELL.format(row=row, column=column))
    return safe_parse_int(text_of(cell, "0"))


def ki_multiplier(soup: BeautifulSoup) -> str:
    """Arrow-prefixed multiplier lines joined with "; "."""
    cell = select_first(soup, rules.KI_MULTIPLIER_CELL)
    if cell is not None:
        html = _SA_MULTIPLIER_LINK.sub(r"\1", inner_html_of(cell))
        parts = html.split(rules.KI_ARROW)
        if len(parts) > 1:
            segments = [_BR.split(p, maxsplit=1)[0].strip() for p in parts[1:]]
            joined = "; ".join(s for s in segments if s)
            if joined:
                return joined

    logger.debug("Ki multiplier cell unusable, trying the card footer")
    right_card = select_first(soup, rules.RIGHT_CARD)
    fallback = select_first(next_sibling_of(right_card), rules.KI_MULTIPLIER_FALLBACK)
    if fallback is not None:
        parts = text_of(fallback).split(rules.KI_ARROW)
        if len(parts) > 1 and parts[1].strip():
            return parts[1].strip()

    return ERROR


def ki_multiplier_at(soup: BeautifulSoup, ki: int) -> str | None:
    """Percentage for one ki level ("12 Ki Multiplier is 150%" -> "150")."""
    cell = select_first(soup, rules.KI_MULTIPLIER_CELL)
    if cell is None:
        return None
    m = re.search(
        rf"(?<!\d){ki}\s*Ki\s*Multiplier[^0-9]*([0-9.]+)",
        inner_html_of(cell),
        re.IGNORECASE,
    )
    return m.group(1) if m else None
