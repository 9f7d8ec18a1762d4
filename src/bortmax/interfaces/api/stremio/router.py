"""Stremio addon API endpoints (manifest, catalog, stream)."""

from __future__ import annotations

from typing import Any, cast
from urllib.parse import parse_qs

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from bortmax import __version__
from bortmax.domain.entities.listing import (
    CONTENT_TYPES,
    CatalogItem,
    ContentType,
    StreamItem,
)
from bortmax.domain.identifiers import normalize_search_term
from bortmax.infrastructure.config.schema import StremioConfig
from bortmax.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["stremio"])

_CATALOG_NAMES: dict[ContentType, tuple[str, str]] = {
    "movie": ("bortmax-movies", "Movies"),
    "series": ("bortmax-series", "Series"),
}


def _build_manifest(stremio: StremioConfig) -> dict[str, Any]:
    """Build the Stremio addon manifest."""
    return {
        "id": stremio.addon_id,
        "version": __version__,
        "name": stremio.addon_name,
        "description": stremio.addon_description,
        "logo": stremio.addon_logo,
        "resources": ["catalog", "stream"],
        "types": list(CONTENT_TYPES),
        "catalogs": [
            {
                "type": content_type,
                "id": catalog_id,
                "name": f"{stremio.addon_name} {label}",
                "extra": [{"name": "search", "isRequired": False}],
            }
            for content_type, (catalog_id, label) in _CATALOG_NAMES.items()
        ],
        "idPrefixes": ["movie:", "series:", "tt"],
        "behaviorHints": {
            "adult": False,
            "configurable": False,
        },
    }


def _format_meta(item: CatalogItem) -> dict[str, str]:
    """Convert a CatalogItem to a Stremio MetaPreview."""
    return {
        "id": item.id,
        "type": item.type,
        "name": item.display_name,
        "poster": item.poster_url,
    }


def _format_stream(stream: StreamItem) -> dict[str, str]:
    """Convert a StreamItem to Stremio JSON format."""
    return {
        "name": stream.source_label,
        "title": stream.title,
        "url": stream.url,
    }


def _parse_extra(extra: str) -> dict[str, str]:
    """Parse a Stremio extra path segment (``search=alien&skip=0``)."""
    return {key: values[0] for key, values in parse_qs(extra).items() if values}


def _filter_by_search(items: list[CatalogItem], query: str) -> list[CatalogItem]:
    needle = normalize_search_term(query).casefold()
    if not needle:
        return []
    return [item for item in items if needle in item.display_name.casefold()]


async def _catalog_items(
    state: AppState, content_type: str, catalog_id: str
) -> list[CatalogItem]:
    if content_type not in CONTENT_TYPES:
        log.info("stremio_catalog_unknown_type", content_type=content_type)
        return []

    try:
        return await state.catalog_cache.get_or_refresh(
            cast(ContentType, content_type)
        )
    except Exception:
        log.warning(
            "stremio_catalog_failed",
            content_type=content_type,
            catalog_id=catalog_id,
            exc_info=True,
        )
        return []


@router.get("/manifest.json")
async def stremio_manifest(request: Request) -> JSONResponse:
    """Serve the Stremio addon manifest."""
    state = cast(AppState, request.app.state)
    return JSONResponse(content=_build_manifest(state.config.stremio))


@router.get("/catalog/{content_type}/{catalog_id}.json")
async def stremio_catalog(
    request: Request,
    content_type: str,
    catalog_id: str,
) -> JSONResponse:
    """Serve the folder catalog for a content type (cached, TTL-bound)."""
    state = cast(AppState, request.app.state)
    items = await _catalog_items(state, content_type, catalog_id)
    return JSONResponse(content={"metas": [_format_meta(i) for i in items]})


@router.get("/catalog/{content_type}/{catalog_id}/{extra}.json")
async def stremio_catalog_extra(
    request: Request,
    content_type: str,
    catalog_id: str,
    extra: str,
) -> JSONResponse:
    """Serve catalog requests carrying Stremio extras.

    ``search`` filters the cached catalog by name. ``skip`` > 0 yields an
    empty page: the catalog is a single capped page.
    """
    state = cast(AppState, request.app.state)
    params = _parse_extra(extra)

    skip = params.get("skip", "0")
    if not skip.isdigit() or int(skip) > 0:
        return JSONResponse(content={"metas": []})

    items = await _catalog_items(state, content_type, catalog_id)
    query = params.get("search")
    if query is not None:
        items = _filter_by_search(items, query)
        log.info(
            "stremio_catalog_search",
            content_type=content_type,
            query=query,
            results=len(items),
        )

    return JSONResponse(content={"metas": [_format_meta(i) for i in items]})


@router.get("/stream/{content_type}/{stream_id}.json")
async def stremio_stream(
    request: Request,
    content_type: str,
    stream_id: str,
) -> JSONResponse:
    """Resolve direct stream URLs for a catalog item or external id."""
    state = cast(AppState, request.app.state)

    log.info("stremio_stream_request", content_type=content_type, id=stream_id)
    streams = await state.stremio_stream_uc.resolve_streams(content_type, stream_id)

    return JSONResponse(content={"streams": [_format_stream(s) for s in streams]})
