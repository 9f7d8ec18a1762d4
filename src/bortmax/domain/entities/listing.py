"""Domain entities for directory listings, catalogs and streams.

Pure value objects with no framework dependencies and no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ContentType = Literal["movie", "series"]

CONTENT_TYPES: tuple[ContentType, ...] = ("movie", "series")


@dataclass(frozen=True)
class DirectoryEntry:
    """One row of an autoindex page.

    ``link`` is the percent-decoded relative path of the entry; directories
    keep their trailing ``/``.
    """

    name: str
    link: str
    is_directory: bool


@dataclass(frozen=True)
class CatalogItem:
    """Stremio catalog item (MetaPreview object) for one upstream folder."""

    id: str  # "movie:Alien 1979"
    type: ContentType
    display_name: str
    poster_url: str = ""


@dataclass(frozen=True)
class StreamItem:
    """Stremio protocol Stream object pointing at a directly fetchable file."""

    title: str
    url: str  # Absolute, percent-encoded
    source_label: str


@dataclass(frozen=True)
class CacheEntry:
    """Catalog snapshot for one content type.

    ``items`` is a tuple so a cached snapshot can only be replaced, never
    edited in place.
    """

    items: tuple[CatalogItem, ...]
    fetched_at_ms: int

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.fetched_at_ms

    def is_stale(self, now_ms: int, ttl_ms: int) -> bool:
        return self.age_ms(now_ms) >= ttl_ms


@dataclass(frozen=True)
class StreamRequest:
    """Parsed Stremio stream request.

    Exactly one of ``folder_token`` (id minted by our own catalog) and
    ``search_term`` (externally supplied id, e.g. ``tt1234567``) is set.
    """

    content_type: ContentType
    raw_id: str
    folder_token: str | None = None
    search_term: str | None = None
    season: int | None = None
    episode: int | None = None

    @property
    def is_catalog_id(self) -> bool:
        return self.folder_token is not None
