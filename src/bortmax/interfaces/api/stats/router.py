"""Read-only runtime metrics."""

from __future__ import annotations

from typing import cast

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from bortmax.interfaces.app_state import AppState

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/metrics")
async def metrics(request: Request) -> JSONResponse:
    """Return counters for upstream fetches, the catalog cache and streams."""
    state = cast(AppState, request.app.state)
    data = state.metrics.snapshot()
    data["active_requests"] = state.graceful_shutdown.active_requests
    return JSONResponse(content=data)
