"""Remote listing fetcher: one bounded GET per directory, no retries."""

from __future__ import annotations

import asyncio
import time
from typing import Protocol

import httpx
import structlog

log = structlog.get_logger(__name__)


class _FetchRecorder(Protocol):
    def record_fetch(self, duration_ns: int, *, success: bool) -> None: ...


class HttpxListingFetcher:
    """Fetch autoindex pages through the shared ``httpx.AsyncClient``.

    Implements ``ListingFetcherPort``. Every failure (timeout, connection
    refused, transport error, non-2xx) is logged and mapped to ``None``;
    the caller decides how to degrade.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        timeout_seconds: float,
        metrics: _FetchRecorder | None = None,
    ) -> None:
        self._http = http_client
        self._timeout = timeout_seconds
        self._metrics = metrics

    async def fetch(self, url: str) -> str | None:
        start = time.perf_counter_ns()
        body = await self._get(url)
        if self._metrics is not None:
            self._metrics.record_fetch(
                time.perf_counter_ns() - start, success=body is not None
            )
        return body

    async def _get(self, url: str) -> str | None:
        if not url.endswith("/"):
            log.warning("listing_fetch_not_directory", url=url)
            return None

        try:
            # httpx timeouts are per phase; the deadline covers the whole GET.
            async with asyncio.timeout(self._timeout):
                resp = await self._http.get(url, timeout=self._timeout)
        except (httpx.TimeoutException, TimeoutError):
            log.warning("listing_fetch_timeout", url=url, timeout=self._timeout)
            return None
        except httpx.HTTPError:
            log.warning("listing_fetch_network_error", url=url, exc_info=True)
            return None

        if not resp.is_success:
            log.warning("listing_fetch_http_error", url=url, status=resp.status_code)
            return None

        log.debug("listing_fetch_complete", url=url, content_length=len(resp.text))
        return resp.text
