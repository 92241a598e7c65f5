"""Character page HTML parser."""

import logging

from bs4 import BeautifulSoup

from dokkandata import extract, rules
from dokkandata.markup import parse_html, select_all, select_first
from dokkandata.models import Character, Transformation

logger = logging.getLogger(__name__)


def parse_character_page(html: str | None, source_url: str = "") -> Character | None:
    """Parse a character page and return its Character, or None."""
    soup = parse_html(html)
    if soup is None:
        logger.warning("Failed to parse HTML for %s", source_url or "<page>")
        return None

    character = assemble(soup)
    if character is None:
        logger.warning(
            "Failed to extract character data from %s", source_url or "<page>",
        )
        return None

    logger.debug(
        "Parsed %s [%s] %s (%d forms)",
        character.id, character.rarity, character.name,
        len(character.transformations or ()),
    )
    return character


def assemble(soup: BeautifulSoup | None) -> Character | None:
    """Build one Character from a parsed page.

    Only a missing card table aborts assembly; every other field degrades to
    "Error", 0, ("Error",) or None on its own.
    """
    if soup is None:
        return None
    if select_first(soup, rules.CARD_TABLE) is None:
        logger.warning("Main character table not found")
        return None

    transformations = parse_transformations(soup)

    skills = {
        name: extract.skill(soup, rule)
        for name, rule in rules.CHARACTER_SKILLS.items()
    }
    stats = {
        name: extract.stat(soup, row, column)
        for name, (row, column) in rules.STAT_FIELDS.items()
    }
    ki12, ki18, ki24 = (
        extract.ki_multiplier_at(soup, ki) for ki in rules.KI_LEVELS
    )

    return Character(
        name=extract.card_name(soup),
        title=extract.card_title(soup),
        max_level=extract.max_level(soup),
        max_sa_level=extract.max_sa_level(soup),
        rarity=extract.rarity(soup),
        card_class=extract.card_class(soup),
        card_type=extract.card_type(soup),
        cost=extract.cost(soup),
        id=extract.card_id(soup),
        image_url=extract.image_url(soup),
        full_image_url=extract.full_image(soup),
        links=tuple(extract.link_skills(soup)),
        categories=tuple(extract.categories(soup)),
        ki_meter=tuple(extract.ki_meter(soup)),
        ki_multiplier=extract.ki_multiplier(soup),
        ki12_multiplier=ki12,
        ki18_multiplier=ki18,
        ki24_multiplier=ki24,
        transformations=tuple(transformations) or None,
        **skills,
        **stats,
    )


def parse_transformations(soup: BeautifulSoup) -> list[Transformation]:
    """One Transformation per form tab, skipping tab 0 (the base form)."""
    tabs = select_all(soup, rules.FORM_TABS)
    if not tabs:
        return []

    transformations: list[Transformation] = []
    for index in range(1, len(tabs)):
        try:
            transformations.append(parse_transformation(soup, index))
        except Exception as e:
            logger.warning("Failed to extract transformation %d: %s", index, e)
    return transformations


def parse_transformation(soup: BeautifulSoup, index: int) -> Transformation:
    """Extract the form shown in panel ``form_scope(index)``."""
    scope = rules.form_scope(index)
    card = f"{scope} > table"

    skills = {
        name: extract.skill(soup, rule, scope)
        for name, rule in rules.TRANSFORMATION_SKILLS.items()
    }

    return Transformation(
        transformed_id=extract.card_id(soup, card, rules.TRANSFORMED_ID_CELL),
        transformed_name=extract.card_name(soup, card),
        transformed_class=extract.card_class(soup, card),
        transformed_type=extract.card_type(soup, card),
        transformed_links=tuple(extract.link_skills(soup, scope)),
        transformed_image_url=extract.image_url(soup, card),
        transformed_full_image_url=extract.full_image(soup, card),
        **skills,
    )
