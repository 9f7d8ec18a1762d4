"""Tests for StremioCatalogUseCase."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from conftest import MOVIE_ROOT, SERIES_ROOT, FakeFetcher, autoindex_page

from bortmax.application.use_cases.stremio_catalog import StremioCatalogUseCase
from bortmax.domain.entities.listing import ContentType
from bortmax.infrastructure.listing.parser import AutoindexParser

_POSTER = "https://img.test/poster.png"


def _make_uc(
    fetcher: FakeFetcher | AsyncMock,
    roots: dict[ContentType, str],
    *,
    max_items: int = 200,
) -> StremioCatalogUseCase:
    return StremioCatalogUseCase(
        fetcher=fetcher,
        parser=AutoindexParser(),
        roots=roots,
        max_items=max_items,
        poster_url=_POSTER,
    )


class TestResolve:
    async def test_movie_catalog_from_nginx_listing(
        self, fake_fetcher: FakeFetcher, roots: dict[ContentType, str]
    ) -> None:
        items = await _make_uc(fake_fetcher, roots).resolve("movie")

        assert [i.id for i in items] == [
            "movie:Alien 1979",
            "movie:Aliens 1986",
            "movie:- Blade Runner (1982)",
            "movie:The Extraordinarily Long Movie Title Of Doom (2001)",
        ]
        assert fake_fetcher.calls == [MOVIE_ROOT]

    async def test_display_names_are_cleaned(
        self, fake_fetcher: FakeFetcher, roots: dict[ContentType, str]
    ) -> None:
        items = await _make_uc(fake_fetcher, roots).resolve("movie")
        assert items[2].display_name == "Blade Runner (1982)"

    async def test_series_catalog_from_apache_listing(
        self, fake_fetcher: FakeFetcher, roots: dict[ContentType, str]
    ) -> None:
        items = await _make_uc(fake_fetcher, roots).resolve("series")

        assert [(i.id, i.display_name) for i in items] == [
            ("series:Breaking Bad", "Breaking Bad"),
            ("series:• Dark", "Dark"),
            ("series:The Wire", "The Wire"),
        ]
        assert all(i.type == "series" for i in items)
        assert all(i.poster_url == _POSTER for i in items)
        assert fake_fetcher.calls == [SERIES_ROOT]

    async def test_files_are_excluded(
        self, fake_fetcher: FakeFetcher, roots: dict[ContentType, str]
    ) -> None:
        items = await _make_uc(fake_fetcher, roots).resolve("movie")
        assert all("readme" not in i.id for i in items)


class TestTruncation:
    async def test_caps_at_max_items_in_upstream_order(
        self, roots: dict[ContentType, str]
    ) -> None:
        links = [f"Folder%20{n:03d}/" for n in range(250)]
        fetcher = FakeFetcher({MOVIE_ROOT: autoindex_page(*links)})

        items = await _make_uc(fetcher, roots).resolve("movie")

        assert len(items) == 200
        assert items[0].id == "movie:Folder 000"
        assert items[-1].id == "movie:Folder 199"

    async def test_custom_cap(self, roots: dict[ContentType, str]) -> None:
        fetcher = FakeFetcher({MOVIE_ROOT: autoindex_page("A/", "B/", "C/")})
        items = await _make_uc(fetcher, roots, max_items=2).resolve("movie")
        assert [i.display_name for i in items] == ["A", "B"]

    async def test_files_do_not_count_against_cap(
        self, roots: dict[ContentType, str]
    ) -> None:
        page = autoindex_page("x.mkv", "y.mkv", "A/", "B/")
        fetcher = FakeFetcher({MOVIE_ROOT: page})
        items = await _make_uc(fetcher, roots, max_items=2).resolve("movie")
        assert [i.display_name for i in items] == ["A", "B"]


class TestFailures:
    async def test_upstream_unavailable(self, roots: dict[ContentType, str]) -> None:
        items = await _make_uc(FakeFetcher(), roots).resolve("movie")
        assert items == []

    async def test_fetcher_raising_is_contained(
        self, roots: dict[ContentType, str]
    ) -> None:
        fetcher = AsyncMock()
        fetcher.fetch.side_effect = RuntimeError("socket exploded")
        assert await _make_uc(fetcher, roots).resolve("movie") == []

    async def test_unknown_root(self) -> None:
        uc = _make_uc(FakeFetcher(), {"movie": MOVIE_ROOT})
        assert await uc.resolve("series") == []

    async def test_parser_raising_is_contained(
        self, fake_fetcher: FakeFetcher, roots: dict[ContentType, str]
    ) -> None:
        parser = MagicMock()
        parser.parse.side_effect = ValueError("bad markup")
        uc = StremioCatalogUseCase(fetcher=fake_fetcher, parser=parser, roots=roots)
        assert await uc.resolve("movie") == []

    async def test_empty_listing(self, roots: dict[ContentType, str]) -> None:
        fetcher = FakeFetcher({MOVIE_ROOT: autoindex_page()})
        assert await _make_uc(fetcher, roots).resolve("movie") == []
