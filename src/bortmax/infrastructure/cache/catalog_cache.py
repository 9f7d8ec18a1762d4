"""In-memory catalog cache with TTL and single-flight refresh."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Protocol

import structlog

from bortmax.domain.entities.listing import CacheEntry, CatalogItem, ContentType

log = structlog.get_logger(__name__)

CatalogResolveFn = Callable[[ContentType], Awaitable[list[CatalogItem]]]


class _CacheRecorder(Protocol):
    def record_cache_hit(self) -> None: ...

    def record_cache_miss(self, *, coalesced: bool) -> None: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


class InMemoryCatalogCache:
    """Per-content-type catalog memo. Implements ``CatalogCachePort``.

    - An entry older than the TTL (``age >= ttl``) is refreshed before it is
      served; the calling request pays the scrape latency.
    - Concurrent misses for the same type share one in-flight refresh task.
    - Entries are replaced wholesale; readers get a fresh list copy.
    - The refresh task is shielded, so a disconnecting client does not
      cancel a scrape other requests are waiting on.

    Args:
        resolve: Produces the full catalog for a content type.
        ttl_seconds: Entry lifetime. 0 means every call refreshes.
        clock: Epoch milliseconds, injectable for tests.
    """

    def __init__(
        self,
        resolve: CatalogResolveFn,
        *,
        ttl_seconds: int = 3600,
        clock: Callable[[], int] = _now_ms,
        metrics: _CacheRecorder | None = None,
    ) -> None:
        self._resolve = resolve
        self._ttl_ms = ttl_seconds * 1000
        self._clock = clock
        self._metrics = metrics
        self._entries: dict[ContentType, CacheEntry] = {}
        self._inflight: dict[ContentType, asyncio.Task[tuple[CatalogItem, ...]]] = {}

    async def get_or_refresh(self, content_type: ContentType) -> list[CatalogItem]:
        entry = self._entries.get(content_type)
        if entry is not None and not entry.is_stale(self._clock(), self._ttl_ms):
            if self._metrics is not None:
                self._metrics.record_cache_hit()
            log.debug(
                "catalog_cache_hit",
                content_type=content_type,
                items=len(entry.items),
            )
            return list(entry.items)

        task = self._inflight.get(content_type)
        coalesced = task is not None
        if task is None:
            task = asyncio.create_task(self._refresh(content_type))
            self._inflight[content_type] = task

        if self._metrics is not None:
            self._metrics.record_cache_miss(coalesced=coalesced)
        log.debug(
            "catalog_cache_miss",
            content_type=content_type,
            stale=entry is not None,
            coalesced=coalesced,
        )
        return list(await asyncio.shield(task))

    async def _refresh(self, content_type: ContentType) -> tuple[CatalogItem, ...]:
        try:
            items = tuple(await self._resolve(content_type))
            self._entries[content_type] = CacheEntry(
                items=items,
                fetched_at_ms=self._clock(),
            )
            log.info(
                "catalog_cache_refreshed",
                content_type=content_type,
                items=len(items),
            )
            return items
        finally:
            self._inflight.pop(content_type, None)
