"""Catalog id minting and Stremio stream-id parsing.

Catalog ids have the shape ``<type>:<folder token>`` where the token is the
folder's decoded link with path separators removed, so a stream request can
go straight to the folder without re-reading the parent listing::

    mint_id("movie", "Alien 1979/")  -> "movie:Alien 1979"
    parse_stream_id("movie", "movie:Alien 1979").folder_token -> "Alien 1979"
    folder_link("Alien 1979") -> "Alien 1979/"

Anything else is treated as an external id (``tt0078748``,
``tt0944947:1:5``) and resolved by substring matching.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from bortmax.domain.entities.listing import CONTENT_TYPES, ContentType, StreamRequest

_SEPARATORS_RE = re.compile(r"[/\\]")
_LEADING_JUNK_RE = re.compile(r"^[\W_]+")


def sanitize(link: str) -> str:
    """Remove path separators so the token survives a URL path segment."""
    return _SEPARATORS_RE.sub("", link)


def mint_id(content_type: ContentType, link: str) -> str:
    return f"{content_type}:{sanitize(link)}"


def folder_link(token: str) -> str:
    """Invert a folder token back to the relative directory link."""
    return f"{token}/"


def normalize_search_term(raw: str) -> str:
    return _LEADING_JUNK_RE.sub("", raw.strip())


def parse_stream_id(content_type: str, raw_id: str) -> StreamRequest | None:
    """Parse a Stremio stream id into a StreamRequest.

    Returns None (treated as "no match") for unknown content types, empty
    tokens and series episode ids with non-numeric season/episode.
    """
    if content_type not in CONTENT_TYPES:
        return None
    ct: ContentType = content_type  # type: ignore[assignment]

    prefix = f"{ct}:"
    if raw_id.startswith(prefix):
        token = sanitize(raw_id[len(prefix):])
        if not token:
            return None
        return StreamRequest(content_type=ct, raw_id=raw_id, folder_token=token)

    term_source = raw_id
    season: int | None = None
    episode: int | None = None

    parts = raw_id.split(":")
    if ct == "series" and len(parts) == 3:
        try:
            season = int(parts[1])
            episode = int(parts[2])
        except ValueError:
            return None
        term_source = parts[0]

    term = normalize_search_term(term_source)
    if not term:
        return None

    return StreamRequest(
        content_type=ct,
        raw_id=raw_id,
        search_term=term,
        season=season,
        episode=episode,
    )


def join_listing_url(base_url: str, link: str) -> str:
    """Append a decoded relative link to a directory URL, percent-encoding it.

    ``base_url`` must already be encoded and end with ``/``.
    """
    return f"{base_url}{quote(link, safe='/')}"
