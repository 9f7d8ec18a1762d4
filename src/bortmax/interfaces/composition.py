"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from bortmax.application.use_cases.stremio_catalog import StremioCatalogUseCase
from bortmax.application.use_cases.stremio_stream import StremioStreamUseCase
from bortmax.domain.entities.listing import ContentType
from bortmax.domain.identifiers import join_listing_url
from bortmax.infrastructure.cache.catalog_cache import InMemoryCatalogCache
from bortmax.infrastructure.config.schema import AppConfig
from bortmax.infrastructure.listing.fetcher import HttpxListingFetcher
from bortmax.infrastructure.listing.folder_matcher import match_folder
from bortmax.infrastructure.listing.parser import AutoindexParser
from bortmax.infrastructure.metrics import MetricsCollector
from bortmax.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

_DRAIN_TIMEOUT_SECONDS = 10.0


def build_roots(config: AppConfig) -> dict[ContentType, str]:
    """Absolute root listing URL per content type; paths are percent-encoded."""
    return {
        "movie": join_listing_url(
            config.upstream_base_url, config.upstream_movie_path
        ),
        "series": join_listing_url(
            config.upstream_base_url, config.upstream_series_path
        ),
    }


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )


def wire_services(state: AppState, config: AppConfig) -> None:
    """Build fetcher, parser, use cases and the catalog cache on *state*.

    Expects ``state.http_client`` and ``state.metrics`` to be set.
    """
    roots = build_roots(config)

    state.fetcher = HttpxListingFetcher(
        http_client=state.http_client,
        timeout_seconds=config.http_timeout_seconds,
        metrics=state.metrics,
    )
    state.parser = AutoindexParser()

    state.stremio_catalog_uc = StremioCatalogUseCase(
        fetcher=state.fetcher,
        parser=state.parser,
        roots=roots,
        max_items=config.catalog.max_items,
        poster_url=config.catalog.poster_url,
    )
    state.catalog_cache = InMemoryCatalogCache(
        state.stremio_catalog_uc.resolve,
        ttl_seconds=config.catalog.ttl_seconds,
        metrics=state.metrics,
    )
    state.stremio_stream_uc = StremioStreamUseCase(
        fetcher=state.fetcher,
        parser=state.parser,
        roots=roots,
        match_fn=match_folder,
        source_label=config.stremio.source_label,
        title_suffix=config.stremio.stream_title_suffix,
        metrics=state.metrics,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Metrics (recorded into by fetcher, cache, stream use case)
        2. HTTP client (shared by every upstream fetch)
        3. Fetcher, parser, use cases, catalog cache
    """
    state = cast(AppState, app.state)
    config = state.config

    state.metrics = MetricsCollector()

    state.http_client = build_http_client(config)
    log.info(
        "http_client_initialized",
        timeout_seconds=config.http_timeout_seconds,
        follow_redirects=config.http_follow_redirects,
    )

    wire_services(state, config)
    log.info(
        "services_initialized",
        upstream=config.upstream_base_url,
        catalog_ttl_seconds=config.catalog.ttl_seconds,
        catalog_max_items=config.catalog.max_items,
    )

    state.graceful_shutdown.mark_ready()
    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.graceful_shutdown.wait_for_drain(timeout=_DRAIN_TIMEOUT_SECONDS)

        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
