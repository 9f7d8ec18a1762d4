"""Stremio catalog use case: top-level upstream folders as catalog items."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from bortmax.domain.entities.listing import CatalogItem, ContentType
from bortmax.domain.identifiers import mint_id
from bortmax.domain.media import clean_display_name
from bortmax.domain.ports.listing_fetcher import ListingFetcherPort
from bortmax.domain.ports.listing_parser import ListingParserPort

log = structlog.get_logger(__name__)


class StremioCatalogUseCase:
    """Builds the browsable catalog for a content type from its root listing.

    Stateless: every call scrapes. Caching is the job of the catalog cache
    that wraps :meth:`resolve`.
    """

    def __init__(
        self,
        *,
        fetcher: ListingFetcherPort,
        parser: ListingParserPort,
        roots: Mapping[ContentType, str],
        max_items: int = 200,
        poster_url: str = "",
    ) -> None:
        self._fetcher = fetcher
        self._parser = parser
        self._roots = roots
        self._max_items = max_items
        self._poster_url = poster_url

    async def resolve(self, content_type: ContentType) -> list[CatalogItem]:
        """Scrape the type's root listing into catalog items.

        Args:
            content_type: ``"movie"`` or ``"series"``.

        Returns:
            Up to ``max_items`` items in upstream listing order; empty when
            the upstream is unavailable or the type has no root.
        """
        root = self._roots.get(content_type)
        if root is None:
            log.warning("catalog_unknown_content_type", content_type=content_type)
            return []

        try:
            markup = await self._fetcher.fetch(root)
            if markup is None:
                log.warning(
                    "catalog_upstream_unavailable",
                    content_type=content_type,
                    url=root,
                )
                return []

            folders = [e for e in self._parser.parse(markup) if e.is_directory]
            items = [
                CatalogItem(
                    id=mint_id(content_type, entry.link),
                    type=content_type,
                    display_name=clean_display_name(entry.name),
                    poster_url=self._poster_url,
                )
                for entry in folders[: self._max_items]
            ]
        except Exception:
            log.warning(
                "catalog_resolve_error",
                content_type=content_type,
                exc_info=True,
            )
            return []

        if len(folders) > self._max_items:
            log.info(
                "catalog_truncated",
                content_type=content_type,
                upstream=len(folders),
                kept=self._max_items,
            )
        log.info("catalog_resolved", content_type=content_type, count=len(items))
        return items
