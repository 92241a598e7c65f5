"""Tests for dokkandata.fetch."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from dokkandata.fetch import (
    cache_name,
    category_url,
    character_url,
    fetch_batch,
    fetch_page,
    fetch_with_cache,
)
from dokkandata.util import FetchError


class TestUrlBuilders:
    def test_category_url(self) -> None:
        assert category_url("LR") == (
            "https://dbz-dokkanbattle.fandom.com/wiki/Category:LR"
        )

    def test_character_url_replaces_spaces(self) -> None:
        assert character_url("Boiling Power Super Saiyan Goku") == (
            "https://dbz-dokkanbattle.fandom.com/wiki/Boiling_Power_Super_Saiyan_Goku"
        )

    def test_character_url_quotes_ampersand(self) -> None:
        url = character_url("Goku & Vegeta (Angel)")
        assert url == "https://dbz-dokkanbattle.fandom.com/wiki/Goku_%26_Vegeta_(Angel)"

    def test_cache_name_is_filesystem_safe(self) -> None:
        name = cache_name(
            "https://dbz-dokkanbattle.fandom.com/wiki/Goku_%26_Vegeta_(Angel)"
        )
        assert name == "Goku___Vegeta__Angel.html"

    def test_cache_name_keeps_category_query(self) -> None:
        name = cache_name(
            "https://dbz-dokkanbattle.fandom.com/wiki/Category:LR?from=Fierce"
        )
        assert name == "Category_LR_from_Fierce.html"


class TestFetchPage:
    """Tests for fetch_page with mocked HTTP."""

    @patch("dokkandata.fetch.time.sleep")
    @patch("dokkandata.fetch.requests.get")
    def test_success_returns_html(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.text = "<html>OK</html>"
        mock_get.return_value = mock_resp

        result = fetch_page("https://example.com")
        assert result == "<html>OK</html>"
        mock_get.assert_called_once()
        assert mock_get.call_args.kwargs["timeout"] == 15

    @patch("dokkandata.fetch.time.sleep")
    @patch("dokkandata.fetch.requests.get")
    def test_retries_on_500(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        fail_resp = MagicMock()
        fail_resp.status_code = 500
        ok_resp = MagicMock()
        ok_resp.status_code = 200
        ok_resp.text = "<html>OK</html>"
        mock_get.side_effect = [fail_resp, ok_resp]

        result = fetch_page("https://example.com")
        assert result == "<html>OK</html>"
        assert mock_get.call_count == 2
        mock_sleep.assert_called_once()  # backoff between retries

    @patch("dokkandata.fetch.time.sleep")
    @patch("dokkandata.fetch.requests.get")
    def test_raises_after_max_retries(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        fail_resp = MagicMock()
        fail_resp.status_code = 503
        mock_get.return_value = fail_resp

        with pytest.raises(FetchError, match="HTTP 503"):
            fetch_page("https://example.com")
        assert mock_get.call_count == 3  # MAX_RETRIES

    @patch("dokkandata.fetch.time.sleep")
    @patch("dokkandata.fetch.requests.get")
    def test_retries_on_connection_error(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        import requests
        mock_get.side_effect = [
            requests.ConnectionError("timeout"),
            MagicMock(status_code=200, text="<html>OK</html>"),
        ]

        result = fetch_page("https://example.com")
        assert result == "<html>OK</html>"
        assert mock_get.call_count == 2

    @patch("dokkandata.fetch.time.sleep")
    @patch("dokkandata.fetch.requests.get")
    def test_exponential_backoff(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        fail_resp = MagicMock()
        fail_resp.status_code = 500
        mock_get.return_value = fail_resp

        with pytest.raises(FetchError):
            fetch_page("https://example.com")

        # Backoff: 1s after attempt 1, 2s after attempt 2
        assert mock_sleep.call_count == 2
        mock_sleep.assert_any_call(1)
        mock_sleep.assert_any_call(2)


class TestFetchWithCache:
    """Tests for fetch_with_cache."""

    @patch("dokkandata.fetch.fetch_page")
    @patch("dokkandata.fetch._page_sleep")
    def test_cache_hit_skips_fetch(self, mock_sleep: MagicMock, mock_fetch: MagicMock, tmp_path: Path) -> None:
        cache_path = tmp_path / "cached.html"
        cache_path.write_text("<html>cached</html>", encoding="utf-8")

        result = fetch_with_cache("https://example.com", cache_path, use_cache=True)
        assert result == "<html>cached</html>"
        mock_fetch.assert_not_called()

    @patch("dokkandata.fetch.fetch_page", return_value="<html>fetched</html>")
    @patch("dokkandata.fetch._page_sleep")
    def test_cache_miss_fetches_and_saves(self, mock_sleep: MagicMock, mock_fetch: MagicMock, tmp_path: Path) -> None:
        cache_path = tmp_path / "sub" / "cached.html"
        assert not cache_path.exists()

        result = fetch_with_cache("https://example.com", cache_path, use_cache=True)
        assert result == "<html>fetched</html>"
        assert cache_path.read_text(encoding="utf-8") == "<html>fetched</html>"

    @patch("dokkandata.fetch.fetch_page", return_value="<html>fetched</html>")
    @patch("dokkandata.fetch._page_sleep")
    def test_cache_off_does_not_save(self, mock_sleep: MagicMock, mock_fetch: MagicMock, tmp_path: Path) -> None:
        cache_path = tmp_path / "cached.html"

        result = fetch_with_cache("https://example.com", cache_path, use_cache=False)
        assert result == "<html>fetched</html>"
        assert not cache_path.exists()

    @patch("dokkandata.fetch.fetch_page", return_value="<html>fetched</html>")
    @patch("dokkandata.fetch._page_sleep")
    def test_cache_path_none(self, mock_sleep: MagicMock, mock_fetch: MagicMock) -> None:
        result = fetch_with_cache("https://example.com", None, use_cache=True)
        assert result == "<html>fetched</html>"


class TestFetchBatch:
    """Tests for fetch_batch with fetch_with_cache mocked out."""

    @patch("dokkandata.fetch.fetch_with_cache")
    def test_preserves_input_order(self, mock_fetch: MagicMock) -> None:
        mock_fetch.side_effect = lambda url, cache_path, use_cache: f"<html>{url}</html>"
        urls = [f"https://example.com/wiki/Card_{i}" for i in range(7)]

        pages, errors = fetch_batch(urls, None, use_cache=False, workers=3)

        assert [url for url, _ in pages] == urls
        assert pages[4][1] == "<html>https://example.com/wiki/Card_4</html>"
        assert errors == []

    @patch("dokkandata.fetch.fetch_with_cache")
    def test_failed_page_is_recorded(self, mock_fetch: MagicMock) -> None:
        def _fake(url: str, cache_path: Path | None, use_cache: bool) -> str:
            if url.endswith("Broken"):
                raise FetchError(f"HTTP 404 for {url}")
            return "<html>OK</html>"

        mock_fetch.side_effect = _fake
        urls = [
            "https://example.com/wiki/Good",
            "https://example.com/wiki/Broken",
        ]

        pages, errors = fetch_batch(urls, None, use_cache=False)

        assert pages == [
            ("https://example.com/wiki/Good", "<html>OK</html>"),
            ("https://example.com/wiki/Broken", None),
        ]
        assert len(errors) == 1
        assert errors[0].url == "https://example.com/wiki/Broken"
        assert "HTTP 404" in errors[0].error
        assert errors[0].attempt == 3

    @patch("dokkandata.fetch.fetch_with_cache")
    def test_cache_write_failure_is_recorded(self, mock_fetch: MagicMock, tmp_path: Path) -> None:
        def _fake(url: str, cache_path: Path | None, use_cache: bool) -> str:
            if url.endswith("Vegeta"):
                raise PermissionError(f"read-only cache: {cache_path}")
            return "<html>OK</html>"

        mock_fetch.side_effect = _fake
        urls = [
            "https://example.com/wiki/Goku",
            "https://example.com/wiki/Vegeta",
            "https://example.com/wiki/Gohan",
        ]

        pages, errors = fetch_batch(urls, tmp_path, use_cache=True, workers=2)

        assert pages == [
            ("https://example.com/wiki/Goku", "<html>OK</html>"),
            ("https://example.com/wiki/Vegeta", None),
            ("https://example.com/wiki/Gohan", "<html>OK</html>"),
        ]
        assert len(errors) == 1
        assert errors[0].url == "https://example.com/wiki/Vegeta"
        assert "read-only cache" in errors[0].error
        assert errors[0].attempt == 1

    @patch("dokkandata.fetch.fetch_with_cache", return_value="<html>OK</html>")
    def test_cache_path_per_url(self, mock_fetch: MagicMock, tmp_path: Path) -> None:
        fetch_batch(["https://example.com/wiki/Goku"], tmp_path, use_cache=True)

        mock_fetch.assert_called_once_with(
            "https://example.com/wiki/Goku", tmp_path / "Goku.html", True,
        )

    def test_empty_batch(self) -> None:
        assert fetch_batch([], None, use_cache=False) == ([], [])
