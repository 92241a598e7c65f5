"""HTTP fetch with retry, backoff, sleep, caching and batching."""

import concurrent.futures
import logging
import random
import re
import time
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote, unquote

import requests

from dokkandata.models import ScrapeError
from dokkandata.util import FetchError

logger = logging.getLogger(__name__)

BASE_URL = "https://dbz-dokkanbattle.fandom.com"
HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; dokkandata/0.1)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}
REQUEST_TIMEOUT = 15  # seconds
MAX_RETRIES = 3
BACKOFF_BASE = 1  # seconds: 1, 2, 4
SLEEP_MIN = 0.5
SLEEP_MAX = 1.5

DEFAULT_CATEGORIES = ("N", "R", "SR", "SSR", "UR", "LR")

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


def category_url(category: str) -> str:
    return f"{BASE_URL}/wiki/Category:{category}"


def character_url(page_title: str) -> str:
    return f"{BASE_URL}/wiki/{quote(page_title.replace(' ', '_'), safe='()_,')}"


def cache_name(url: str) -> str:
    """Filesystem-safe cache file name for a wiki URL."""
    tail = unquote(url.rstrip("/").rsplit("/wiki/", 1)[-1])
    return _UNSAFE_FILENAME.sub("_", tail).strip("_") + ".html"


def fetch_page(url: str) -> str:
    """Fetch a page with retry and exponential backoff."""
    last_error = None
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            logger.debug("Fetching %s (attempt %d/%d)", url, attempt, MAX_RETRIES)
            resp = requests.get(url, headers=HEADERS, timeout=REQUEST_TIMEOUT)
            if resp.status_code == 200:
                logger.debug("OK %s", url)
                return resp.text
            logger.warning(
                "HTTP %d for %s (attempt %d/%d)",
                resp.status_code, url, attempt, MAX_RETRIES,
            )
            last_error = FetchError(
                f"HTTP {resp.status_code} for {url}"
            )
        except requests.RequestException as e:
            logger.warning(
                "Connection error for %s (attempt %d/%d): %s",
                url, attempt, MAX_RETRIES, e,
            )
            last_error = FetchError(f"Connection error for {url}: {e}")

        if attempt < MAX_RETRIES:
            backoff = BACKOFF_BASE * (2 ** (attempt - 1))
            logger.debug("Backoff %ds before retry", backoff)
            time.sleep(backoff)

    raise last_error  # type: ignore[misc]


def _page_sleep() -> None:
    """Random sleep between page fetches."""
    delay = random.uniform(SLEEP_MIN, SLEEP_MAX)
    time.sleep(delay)


def fetch_with_cache(
    url: str,
    cache_path: Path | None,
    use_cache: bool,
) -> str:
    """Fetch a page, optionally using/saving cache."""
    if use_cache and cache_path and cache_path.exists():
        logger.debug("Cache hit: %s", cache_path)
        return cache_path.read_text(encoding="utf-8")

    html = fetch_page(url)
    _page_sleep()

    if use_cache and cache_path:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text(html, encoding="utf-8")
        logger.debug("Cached to %s", cache_path)

    return html


def fetch_batch(
    urls: list[str],
    cache_dir: Path | None,
    use_cache: bool,
    workers: int = 5,
) -> tuple[list[tuple[str, str | None]], list[ScrapeError]]:
    """Fetch urls with at most ``workers`` requests in flight.

    Returns (url, html) pairs in input order, with html None for pages that
    failed after all retries or could not be read from / written to the
    cache, plus one ScrapeError per failed page.
    """
    def _one(url: str) -> str:
        cache_path = cache_dir / cache_name(url) if cache_dir else None
        return fetch_with_cache(url, cache_path, use_cache)

    pages: list[tuple[str, str | None]] = []
    errors: list[ScrapeError] = []
    with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = [executor.submit(_one, url) for url in urls]
        for url, future in zip(urls, futures):
            html = None
            try:
                html = future.result()
            except FetchError as e:
                logger.error("Failed to fetch %s after %d attempts: %s", url, MAX_RETRIES, e)
                errors.append(_batch_error(url, e, MAX_RETRIES))
            except OSError as e:
                logger.error("Cache I/O failed for %s: %s", url, e)
                errors.append(_batch_error(url, e, 1))
            pages.append((url, html))
    return pages, errors


def _batch_error(url: str, exc: Exception, attempt: int) -> ScrapeError:
    return ScrapeError(
        url=url,
        error=str(exc),
        timestamp=datetime.now(timezone.utc).isoformat(),
        attempt=attempt,
    )
