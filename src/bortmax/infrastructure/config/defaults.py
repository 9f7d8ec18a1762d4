"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "bortmax",
    "environment": "dev",
    "upstream": {
        "base_url": "http://localhost:8000/",
        "movie_path": "movies/",
        "series_path": "tvs/",
    },
    "http": {
        "timeout_seconds": 12.0,
        "follow_redirects": True,
        "user_agent": "BortMax/1.0.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "catalog": {
        "ttl_seconds": 3600,
        "max_items": 200,
        "poster_url": "https://i.imgur.com/1tDdDUF.png",
    },
    "stremio": {
        "addon_id": "com.bortmax.streams",
        "addon_name": "Bort Max",
        "stream_title_suffix": "(Direct Stream)",
        "source_label": "Bort Max",
    },
}
