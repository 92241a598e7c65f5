"""Category listing page HTML parser."""

import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from dokkandata.markup import attr_of, parse_html, select_all, select_first

logger = logging.getLogger(__name__)

MEMBER_LINK = ".category-page__member-link"
NEXT_PAGE_LINK = ".category-page__pagination-next"


def _absolute(base_url: str, href: str) -> str:
    return urljoin(base_url.rstrip("/") + "/", href)


def harvest_links(soup: BeautifulSoup | None, base_url: str) -> list[str]:
    """Character page URLs listed on a category page, in page order."""
    links: list[str] = []
    for anchor in select_all(soup, MEMBER_LINK) or []:
        href = attr_of(anchor, "href", "")
        if not href:
            continue
        links.append(_absolute(base_url, href))
    return links


def next_page_url(soup: BeautifulSoup | None, base_url: str) -> str | None:
    """URL of the next listing page when the category is paginated."""
    href = attr_of(select_first(soup, NEXT_PAGE_LINK), "href", "")
    return _absolute(base_url, href) if href else None


def parse_category_page(html: str | None, base_url: str) -> list[str]:
    """Parse a category page and return absolute character page URLs."""
    soup = parse_html(html)
    if soup is None:
        return []
    links = harvest_links(soup, base_url)
    logger.info("Found %d character links", len(links))
    return links
