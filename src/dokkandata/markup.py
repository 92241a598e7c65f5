"""Null-tolerant HTML document queries.

Every helper accepts a possibly-absent scope or node and answers with an
absent value or fallback instead of raising. Invalid CSS selectors are
logged and treated as "no match".
"""

import logging

import soupsieve
from bs4 import BeautifulSoup, Tag

from dokkandata.models import ERROR

logger = logging.getLogger(__name__)

Scope = BeautifulSoup | Tag | None


def parse_html(html: str | None) -> BeautifulSoup | None:
    """Parse raw markup into a document, or None when it cannot be parsed."""
    if html is None:
        logger.warning("No markup to parse")
        return None
    try:
        return BeautifulSoup(html, "html.parser")
    except Exception as e:
        logger.warning("Failed to parse HTML: %s", e)
        return None


def select_first(scope: Scope, selector: str) -> Tag | None:
    if scope is None:
        return None
    try:
        return scope.select_one(selector)
    except soupsieve.SelectorSyntaxError:
        logger.warning("Invalid selector %r", selector)
        return None


def select_all(scope: Scope, selector: str) -> list[Tag] | None:
    if scope is None:
        return None
    try:
        return list(scope.select(selector))
    except soupsieve.SelectorSyntaxError:
        logger.warning("Invalid selector %r", selector)
        return None


def text_of(node: Tag | None, fallback: str = ERROR) -> str:
    """Trimmed text content of node; fallback only when node is absent."""
    if node is None:
        return fallback
    return node.get_text().strip()


def attr_of(node: Tag | None, name: str, fallback: str = ERROR) -> str:
    if node is None:
        return fallback
    value = node.get(name)
    if value is None:
        return fallback
    if isinstance(value, list):
        return " ".join(value)
    return value


def inner_html_of(node: Tag | None, fallback: str = ERROR) -> str:
    if node is None:
        return fallback
    return node.decode_contents()


def texts_of(nodes: list[Tag] | None) -> list[str]:
    """Text of each node in order; ["Error"] when the node list is absent."""
    if nodes is None:
        return [ERROR]
    return [text_of(n) for n in nodes]


def next_sibling_of(node: Tag | None) -> Tag | None:
    """Adjacent element sibling, skipping text nodes."""
    if node is None:
        return None
    return node.find_next_sibling()


def closest(node: Tag | None, selector: str) -> Tag | None:
    """Nearest ancestor (or node itself) matching selector."""
    if node is None:
        return None
    try:
        return soupsieve.closest(selector, node)
    except soupsieve.SelectorSyntaxError:
        logger.warning("Invalid closest selector %r", selector)
        return None


def image_selector(image_name: str) -> str:
    """Attribute selector for a header tagged by its icon's file name."""
    escaped = image_name.replace("\\", "\\\\").replace('"', '\\"')
    return f'[data-image-name="{escaped}"]'


def find_by_image_name(scope: Scope, image_name: str) -> Tag | None:
    """First element tagged with data-image-name (e.g. "Leader Skill.png")."""
    return select_first(scope, image_selector(image_name))
