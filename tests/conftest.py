"""Shared pytest fixtures for loading HTML test fixtures."""

from pathlib import Path

import pytest
from bs4 import BeautifulSoup

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture()
def standard_html() -> str:
    return (FIXTURES_DIR / "character_standard.html").read_text(encoding="utf-8")


@pytest.fixture()
def transform_html() -> str:
    return (FIXTURES_DIR / "character_transform.html").read_text(encoding="utf-8")


@pytest.fixture()
def category_html() -> str:
    return (FIXTURES_DIR / "category.html").read_text(encoding="utf-8")


@pytest.fixture()
def category_empty_html() -> str:
    return (FIXTURES_DIR / "category_empty.html").read_text(encoding="utf-8")


@pytest.fixture()
def standard_soup(standard_html: str) -> BeautifulSoup:
    return BeautifulSoup(standard_html, "html.parser")


@pytest.fixture()
def transform_soup(transform_html: str) -> BeautifulSoup:
    return BeautifulSoup(transform_html, "html.parser")
