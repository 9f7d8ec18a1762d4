"""Playable-media detection and display-name cleanup."""

from __future__ import annotations

import re
from posixpath import splitext

MEDIA_EXTENSIONS: frozenset[str] = frozenset(
    {"mkv", "mp4", "avi", "mov", "wmv", "flv", "webm", "m4v", "ts", "m3u8"}
)

# Leading run of non-alphanumerics: ordering artifacts like "- ", "• ", "[".
_LEADING_JUNK_RE = re.compile(r"^[\W_]+")


def media_extension(name: str) -> str | None:
    """Return the lowercase extension if *name* is a playable file, else None."""
    ext = splitext(name.strip())[1].lower().lstrip(".")
    return ext if ext in MEDIA_EXTENSIONS else None


def is_media_file(name: str) -> bool:
    return media_extension(name) is not None


def clean_display_name(name: str) -> str:
    """Strip trailing slashes and leading non-alphanumerics.

    Falls back to the stripped input when nothing alphanumeric remains,
    so a folder called ``---`` still gets a visible name.
    """
    stripped = name.strip().rstrip("/").strip()
    cleaned = _LEADING_JUNK_RE.sub("", stripped)
    return cleaned or stripped
