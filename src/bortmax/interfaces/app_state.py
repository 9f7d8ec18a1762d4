"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from bortmax.infrastructure.config import AppConfig
from bortmax.infrastructure.graceful_shutdown import GracefulShutdown

if TYPE_CHECKING:
    from bortmax.application.use_cases.stremio_catalog import StremioCatalogUseCase
    from bortmax.application.use_cases.stremio_stream import StremioStreamUseCase
    from bortmax.domain.ports import (
        CatalogCachePort,
        ListingFetcherPort,
        ListingParserPort,
    )
    from bortmax.infrastructure.metrics import MetricsCollector


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    metrics: MetricsCollector
    graceful_shutdown: GracefulShutdown

    # Domain Ports
    fetcher: ListingFetcherPort
    parser: ListingParserPort
    catalog_cache: CatalogCachePort

    # Application Services
    stremio_catalog_uc: StremioCatalogUseCase
    stremio_stream_uc: StremioStreamUseCase
