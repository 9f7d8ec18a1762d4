"""Autoindex listing parser (Apache, nginx, lighttpd, Caddy style pages).

Every ``<a href>`` in document order is a candidate row. Navigation links
(parent directory, column sort links, external links) and rows without
display text are dropped; malformed markup simply produces fewer entries.
"""

from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

import structlog
from bs4 import BeautifulSoup, Tag

from bortmax.domain.entities.listing import DirectoryEntry

log = structlog.get_logger(__name__)

# Labels used for the "up one level" row across autoindex implementations.
_PARENT_LABELS: frozenset[str] = frozenset(
    {"parent directory", "parent directory/", "..", "../", "up", "[to parent directory]"}
)

# nginx truncates long names as "Some very long na..>"
_TRUNCATED_RE = re.compile(r"\.\.>$")


def _relative_link(href: str) -> tuple[str, bool] | None:
    """Reduce an href to ``(decoded last segment, is_directory)``.

    Returns None for hrefs that can never be a child entry.
    """
    href = href.strip()
    if not href or href.startswith(("?", "#")):
        return None

    try:
        parts = urlsplit(href)
    except ValueError:
        return None
    if parts.scheme or parts.netloc or parts.query:
        return None

    path = parts.path
    is_directory = path.endswith("/")
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    if segment in ("", ".", ".."):
        return None

    return unquote(segment), is_directory


def _display_text(anchor: Tag, segment: str) -> str:
    text = anchor.get_text(strip=True)
    if not text:
        return ""
    if _TRUNCATED_RE.search(text):
        return segment
    return text.rstrip("/").strip()


class AutoindexParser:
    """BeautifulSoup/lxml implementation of ``ListingParserPort``."""

    def parse(self, markup: str) -> list[DirectoryEntry]:
        if not markup or not markup.strip():
            return []

        soup = BeautifulSoup(markup, "lxml")
        entries: list[DirectoryEntry] = []
        seen: set[str] = set()

        for anchor in soup.find_all("a", href=True):
            if anchor.get_text(strip=True).lower() in _PARENT_LABELS:
                continue

            href = anchor.get("href")
            if not isinstance(href, str):
                continue
            relative = _relative_link(href)
            if relative is None:
                continue
            segment, is_directory = relative

            name = _display_text(anchor, segment)
            if not name:
                continue

            link = f"{segment}/" if is_directory else segment
            # Fancy-index tables repeat the same href (icon + name column).
            if link in seen:
                continue
            seen.add(link)

            entries.append(
                DirectoryEntry(name=name, link=link, is_directory=is_directory)
            )

        log.debug("listing_parsed", entries=len(entries))
        return entries
