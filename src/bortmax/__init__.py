"""Bort Max: Stremio addon serving direct streams from an autoindex server."""

from __future__ import annotations

__version__ = "1.0.0"
