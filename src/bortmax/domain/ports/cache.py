"""Cache Port - interface for the per-type catalog cache."""

from __future__ import annotations

from typing import Protocol

from bortmax.domain.entities.listing import CatalogItem, ContentType


class CatalogCachePort(Protocol):
    """Per-content-type catalog memo with a fixed TTL.

    Implementations:
      - InMemoryCatalogCache (process-local, single-flight refresh)
    """

    async def get_or_refresh(self, content_type: ContentType) -> list[CatalogItem]:
        """Return the cached catalog, refreshing it first when missing or stale."""
        ...
