"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from bortmax import __version__
from bortmax.infrastructure.config import AppConfig
from bortmax.infrastructure.graceful_shutdown import GracefulShutdown
from bortmax.interfaces.api.middleware import OpenCorsMiddleware
from bortmax.interfaces.api.stats.router import router as stats_router
from bortmax.interfaces.api.stremio.router import router as stremio_router
from bortmax.interfaces.app_state import AppState
from bortmax.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create the FastAPI app. Configuration only, no resource initialization.

    Resources (HTTP client, fetcher, catalog cache) are created in lifespan().
    """
    app = FastAPI(
        title="Bort Max",
        description="Stremio addon serving direct streams from a directory listing",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config
    app.state.graceful_shutdown = GracefulShutdown()

    app.add_middleware(OpenCorsMiddleware)

    app.include_router(stremio_router)
    app.include_router(stats_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness check: 200 as long as the process is running."""
        return {"status": "ok"}

    @app.get("/ready")
    async def ready() -> Response:
        """Readiness check: 200 after startup completes, 503 otherwise."""
        gs: GracefulShutdown = app.state.graceful_shutdown
        if gs.is_ready:
            return JSONResponse({"status": "ready"}, status_code=200)
        return JSONResponse({"status": "not_ready"}, status_code=503)

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        gs: GracefulShutdown = app.state.graceful_shutdown
        gs.request_started()
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            gs.request_finished()
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
