"""In-flight request tracking, readiness flag and shutdown drain."""

from __future__ import annotations

import asyncio

import structlog

log = structlog.get_logger(__name__)


class GracefulShutdown:
    """Counts active requests so shutdown can wait for them.

    The request-logging middleware brackets every request with
    :meth:`request_started` / :meth:`request_finished`; the lifespan calls
    :meth:`mark_ready` after wiring and :meth:`wait_for_drain` on exit.
    """

    def __init__(self) -> None:
        self._active = 0
        self._ready = False
        self._stopping = False
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def active_requests(self) -> int:
        return self._active

    @property
    def is_ready(self) -> bool:
        return self._ready and not self._stopping

    def mark_ready(self) -> None:
        self._ready = True

    def request_started(self) -> None:
        self._active += 1
        self._idle.clear()

    def request_finished(self) -> None:
        self._active = max(0, self._active - 1)
        if self._active == 0:
            self._idle.set()

    async def wait_for_drain(self, *, timeout: float = 10.0) -> bool:
        """Stop reporting ready and wait for in-flight requests.

        Returns True when drained, False when *timeout* elapsed first.
        """
        self._stopping = True
        if self._active == 0:
            return True

        log.info("shutdown_draining", active_requests=self._active)
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=timeout)
        except TimeoutError:
            log.warning(
                "shutdown_drain_timeout",
                remaining_requests=self._active,
                timeout=timeout,
            )
            return False
        log.info("shutdown_drained")
        return True
