"""Shared test fixtures for the Bort Max test suite."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from urllib.parse import unquote

import pytest
import respx

from bortmax.domain.entities.listing import ContentType
from bortmax.infrastructure.listing.parser import AutoindexParser

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "html"

BASE_URL = "http://vault.test/"
MOVIE_ROOT = f"{BASE_URL}movies/"
SERIES_ROOT = f"{BASE_URL}tvs/"


def load_html(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def autoindex_page(*links: str) -> str:
    """Minimal nginx-style listing with one anchor per link (already encoded)."""
    rows = "\n".join(f'<a href="{link}">{unquote(link)}</a>' for link in links)
    return f'<html><body><pre><a href="../">../</a>\n{rows}\n</pre></body></html>'


class FakeFetcher:
    """Dict-backed ``ListingFetcherPort``; unknown URLs behave like a failed fetch."""

    def __init__(self, pages: Mapping[str, str | None] | None = None) -> None:
        self.pages: dict[str, str | None] = dict(pages or {})
        self.calls: list[str] = []

    async def fetch(self, url: str) -> str | None:
        self.calls.append(url)
        return self.pages.get(url)


# ---------------------------------------------------------------------------
# Listing fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture()
def nginx_movies_html() -> str:
    return load_html("nginx_movies.html")


@pytest.fixture()
def apache_series_html() -> str:
    return load_html("apache_series.html")


@pytest.fixture()
def alien_folder_html() -> str:
    return load_html("nginx_alien_folder.html")


@pytest.fixture()
def parser() -> AutoindexParser:
    return AutoindexParser()


@pytest.fixture()
def roots() -> dict[ContentType, str]:
    return {"movie": MOVIE_ROOT, "series": SERIES_ROOT}


@pytest.fixture()
def fake_fetcher(
    nginx_movies_html: str,
    apache_series_html: str,
    alien_folder_html: str,
) -> FakeFetcher:
    """Upstream with a movie root, a series root and one movie folder."""
    return FakeFetcher(
        {
            MOVIE_ROOT: nginx_movies_html,
            SERIES_ROOT: apache_series_html,
            f"{MOVIE_ROOT}Alien%201979/": alien_folder_html,
        }
    )
