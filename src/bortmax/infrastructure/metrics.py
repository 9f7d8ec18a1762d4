"""Zero-impact in-memory counters.

All counters are plain Python integers manipulated inside the single-threaded
async event loop, so no locks are needed.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field


def _avg_ms(total_ns: int, count: int) -> float:
    return round(total_ns / count / 1_000_000, 1) if count else 0.0


@dataclass
class FetchStats:
    """Upstream listing fetches."""

    requests: int = 0
    successes: int = 0
    failures: int = 0
    total_duration_ns: int = 0

    def snapshot(self) -> dict[str, object]:
        return {
            "requests": self.requests,
            "successes": self.successes,
            "failures": self.failures,
            "avg_duration_ms": _avg_ms(self.total_duration_ns, self.requests),
        }


@dataclass
class CatalogCacheStats:
    hits: int = 0
    misses: int = 0
    refreshes: int = 0
    coalesced: int = 0  # waited on an in-flight refresh instead of starting one

    def snapshot(self) -> dict[str, object]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "refreshes": self.refreshes,
            "coalesced": self.coalesced,
        }


@dataclass
class StreamStats:
    requests: int = 0
    catalog_ids: int = 0
    matched_ids: int = 0
    no_match: int = 0
    streams_returned: int = 0

    def snapshot(self) -> dict[str, object]:
        return {
            "requests": self.requests,
            "catalog_ids": self.catalog_ids,
            "matched_ids": self.matched_ids,
            "no_match": self.no_match,
            "streams_returned": self.streams_returned,
        }


@dataclass
class MetricsCollector:
    """Central in-memory metrics collector."""

    _fetch: FetchStats = field(default_factory=FetchStats)
    _catalog_cache: CatalogCacheStats = field(default_factory=CatalogCacheStats)
    _streams: StreamStats = field(default_factory=StreamStats)
    _start_ns: int = field(default_factory=time.perf_counter_ns)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_fetch(self, duration_ns: int, *, success: bool) -> None:
        self._fetch.requests += 1
        self._fetch.total_duration_ns += duration_ns
        if success:
            self._fetch.successes += 1
        else:
            self._fetch.failures += 1

    def record_cache_hit(self) -> None:
        self._catalog_cache.hits += 1

    def record_cache_miss(self, *, coalesced: bool) -> None:
        self._catalog_cache.misses += 1
        if coalesced:
            self._catalog_cache.coalesced += 1
        else:
            self._catalog_cache.refreshes += 1

    def record_stream_lookup(
        self,
        *,
        catalog_id: bool,
        matched: bool,
        stream_count: int,
    ) -> None:
        """Record one stream resolution.

        ``matched`` is False when no folder could be determined at all.
        """
        self._streams.requests += 1
        if not matched:
            self._streams.no_match += 1
        elif catalog_id:
            self._streams.catalog_ids += 1
        else:
            self._streams.matched_ids += 1
        self._streams.streams_returned += stream_count

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-serializable snapshot of all metrics."""
        uptime_s = round((time.perf_counter_ns() - self._start_ns) / 1_000_000_000, 1)
        return {
            "uptime_seconds": uptime_s,
            "upstream_fetch": self._fetch.snapshot(),
            "catalog_cache": self._catalog_cache.snapshot(),
            "streams": self._streams.snapshot(),
        }
