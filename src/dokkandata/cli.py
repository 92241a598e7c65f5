"""CLI entry point and main processing flow."""

import argparse
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

from dokkandata.fetch import (
    BASE_URL,
    DEFAULT_CATEGORIES,
    cache_name,
    category_url,
    character_url,
    fetch_batch,
    fetch_with_cache,
)
from dokkandata.io_json import update_characters_json
from dokkandata.markup import parse_html
from dokkandata.models import Character, ScrapeError, ScrapeStats
from dokkandata.parse_category import harvest_links, next_page_url
from dokkandata.parse_character import parse_character_page
from dokkandata.util import DokkandataError, FetchError

logger = logging.getLogger("dokkandata")

MAX_CATEGORY_PAGES = 50


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dokkandata",
        description="Scrape Dokkan Battle character cards from the fan wiki into JSON.",
    )
    parser.add_argument(
        "--category", action="append", default=None,
        help="Category to crawl, repeatable (default: N R SR SSR UR LR)",
    )
    parser.add_argument(
        "--page", action="append", default=[],
        help="Extra character page title to scrape, repeatable",
    )
    parser.add_argument(
        "--limit", type=int, default=0,
        help="Max characters per category, 0 for no limit (default: 0)",
    )
    parser.add_argument(
        "--workers", type=int, default=5,
        help="Concurrent page fetches (default: 5)",
    )
    parser.add_argument(
        "--batch-size", type=int, default=10,
        help="Pages fetched per batch (default: 10)",
    )
    parser.add_argument(
        "--force", action="store_true", default=False,
        help="Replace the output file instead of upserting (default: upsert)",
    )
    parser.add_argument(
        "--raw-cache", choices=["on", "off"], default="on",
        help="HTML cache mode (default: on)",
    )
    parser.add_argument(
        "--output", default=None,
        help="Output JSON path (default: data/characters.json)",
    )
    parser.add_argument(
        "--log-level", choices=["INFO", "DEBUG"], default="INFO",
        help="Logging level (default: INFO)",
    )
    return parser


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )


def _project_root() -> Path:
    """Find project root (directory containing pyproject.toml or data/)."""
    p = Path.cwd()
    for _ in range(10):
        if (p / "pyproject.toml").exists():
            return p
        if (p / "data").is_dir():
            return p
        parent = p.parent
        if parent == p:
            break
        p = parent
    return Path.cwd()


def _scrape_error(url: str, error: Exception) -> ScrapeError:
    return ScrapeError(
        url=url,
        error=str(error),
        timestamp=datetime.now(timezone.utc).isoformat(),
        attempt=1,
    )


def collect_category_links(
    category: str,
    cache_dir: Path,
    use_cache: bool,
    errors: list[ScrapeError],
) -> list[str]:
    """Character URLs of a category, following listing pagination."""
    url: str | None = category_url(category)
    links: list[str] = []
    for page_no in range(1, MAX_CATEGORY_PAGES + 1):
        if url is None:
            break
        cache_path = cache_dir / f"category_{cache_name(url)}" if use_cache else None
        try:
            html = fetch_with_cache(url, cache_path, use_cache)
        except FetchError as e:
            logger.error("Failed to fetch category page %s: %s", url, e)
            errors.append(_scrape_error(url, e))
            break

        soup = parse_html(html)
        if soup is None:
            logger.error("Failed to parse category page: %s", url)
            break
        page_links = harvest_links(soup, BASE_URL)
        logger.debug("Category %s page %d: %d links", category, page_no, len(page_links))
        links.extend(page_links)
        url = next_page_url(soup, BASE_URL)

    if not links:
        logger.warning("No character links found in category: %s", category)
    return links


def scrape_pages(
    urls: list[str],
    cache_dir: Path,
    use_cache: bool,
    workers: int,
    batch_size: int,
    errors: list[ScrapeError],
) -> list[Character]:
    """Fetch and assemble character pages in batches."""
    characters: list[Character] = []
    batch_size = max(1, batch_size)
    total_batches = (len(urls) + batch_size - 1) // batch_size

    for start in range(0, len(urls), batch_size):
        batch = urls[start:start + batch_size]
        batch_no = start // batch_size + 1
        logger.info(
            "Processing batch %d/%d (%d characters)", batch_no, total_batches, len(batch),
        )
        pages, batch_errors = fetch_batch(batch, cache_dir, use_cache, workers)
        errors.extend(batch_errors)

        for url, html in pages:
            if html is None:
                continue
            character = parse_character_page(html, url)
            if character is not None:
                characters.append(character)

    return characters


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    _setup_logging(args.log_level)

    categories = args.category or list(DEFAULT_CATEGORIES)
    use_cache = args.raw_cache == "on"
    root = _project_root()
    output_path = Path(args.output) if args.output else root / "data" / "characters.json"
    cache_dir = root / "data" / "raw"

    logger.info("Starting dokkandata for categories=%s pages=%d",
                ",".join(categories), len(args.page))
    logger.info("Options: force=%s cache=%s workers=%d batch_size=%d limit=%d",
                args.force, use_cache, args.workers, args.batch_size, args.limit)

    start_time = time.time()
    errors: list[ScrapeError] = []

    try:
        # 1. Harvest character links per category
        urls: list[str] = []
        seen: set[str] = set()
        for category in categories:
            links = collect_category_links(
                category, cache_dir / "category", use_cache, errors,
            )
            if args.limit > 0:
                links = links[:args.limit]
            new_links = [u for u in links if u not in seen]
            seen.update(new_links)
            urls.extend(new_links)
            logger.info("Category %s: %d links (%d new)",
                        category, len(links), len(new_links))

        for title in args.page:
            url = character_url(title)
            if url not in seen:
                seen.add(url)
                urls.append(url)

        # 2. Fetch & assemble characters
        characters = scrape_pages(
            urls, cache_dir / "pages", use_cache,
            args.workers, args.batch_size, errors,
        )

        # 3. JSON output
        stats = ScrapeStats(
            total_characters=len(characters),
            processing_time=round(time.time() - start_time, 2),
            categories_processed=list(categories),
            errors=errors,
        )
        update_characters_json(characters, output_path, args.force, stats)

        # 4. Summary
        logger.info("=== Summary ===")
        logger.info("Pages: %d", len(urls))
        logger.info("Characters: %d", len(characters))
        logger.info("Errors: %d", len(errors))
        logger.info("Elapsed: %.1fs", stats.processing_time)

    except DokkandataError as e:
        logger.error("Fatal error: %s", e)
        sys.exit(1)
    except Exception as e:
        logger.error("Unexpected error: %s", e, exc_info=True)
        sys.exit(1)
