"""Stremio stream resolution use case.

stream id -> folder (direct for our own catalog ids, substring match for
external ids) -> folder listing -> media files -> StreamItem list.

Best effort: every failure (upstream down, no matching folder, folder
without playable files, malformed id) ends in an empty list.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

import structlog
from guessit import guessit

from bortmax.domain.entities.listing import (
    ContentType,
    DirectoryEntry,
    StreamItem,
    StreamRequest,
)
from bortmax.domain.identifiers import folder_link, join_listing_url, parse_stream_id
from bortmax.domain.media import is_media_file
from bortmax.domain.ports.listing_fetcher import ListingFetcherPort
from bortmax.domain.ports.listing_parser import ListingParserPort

log = structlog.get_logger(__name__)

# (root listing entries, search term) -> matching folder link or None
_MatchFn = Callable[[Sequence[DirectoryEntry], str], "str | None"]


class _StreamRecorder(Protocol):
    def record_stream_lookup(
        self,
        *,
        catalog_id: bool,
        matched: bool,
        stream_count: int,
    ) -> None: ...


def _as_int_set(value: Any) -> set[int]:
    if isinstance(value, int):
        return {value}
    if isinstance(value, list):
        return {v for v in value if isinstance(v, int)}
    return set()


def _filter_by_episode(
    files: list[DirectoryEntry],
    season: int | None,
    episode: int | None,
) -> list[DirectoryEntry]:
    """Keep files tagged with the requested season/episode.

    Files without parseable episode info are kept. If no file carries
    episode info at all, the list is returned unchanged.
    """
    if season is None and episode is None:
        return files

    kept: list[DirectoryEntry] = []
    for entry in files:
        info = guessit(entry.link)
        seasons = _as_int_set(info.get("season"))
        episodes = _as_int_set(info.get("episode"))

        if season is not None and seasons and season not in seasons:
            continue
        if episode is not None and episodes and episode not in episodes:
            continue
        kept.append(entry)

    if len(kept) < len(files):
        log.debug(
            "episode_filter_applied",
            season=season,
            episode=episode,
            before=len(files),
            after=len(kept),
        )
    return kept


class StremioStreamUseCase:
    """Resolves playable direct URLs for a catalog or external id."""

    def __init__(
        self,
        *,
        fetcher: ListingFetcherPort,
        parser: ListingParserPort,
        roots: Mapping[ContentType, str],
        match_fn: _MatchFn,
        source_label: str = "",
        title_suffix: str = "",
        metrics: _StreamRecorder | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._parser = parser
        self._roots = roots
        self._match = match_fn
        self._source_label = source_label
        self._title_suffix = title_suffix
        self._metrics = metrics

    async def resolve_streams(
        self,
        content_type: str,
        raw_id: str,
    ) -> list[StreamItem]:
        """Resolve streams for ``/stream/{content_type}/{raw_id}.json``.

        Never raises.
        """
        request = parse_stream_id(content_type, raw_id)
        if request is None or request.content_type not in self._roots:
            log.info("stream_id_unresolvable", content_type=content_type, id=raw_id)
            self._record(catalog_id=False, matched=False, stream_count=0)
            return []

        try:
            return await self._resolve(request)
        except Exception:
            log.warning(
                "stream_resolve_error",
                content_type=content_type,
                id=raw_id,
                exc_info=True,
            )
            return []

    async def _resolve(self, request: StreamRequest) -> list[StreamItem]:
        root = self._roots[request.content_type]

        link = await self._locate_folder(request, root)
        if link is None:
            self._record(catalog_id=request.is_catalog_id, matched=False, stream_count=0)
            return []

        folder_url = join_listing_url(root, link)
        markup = await self._fetcher.fetch(folder_url)
        if markup is None:
            log.warning("stream_upstream_unavailable", url=folder_url)
            self._record(catalog_id=request.is_catalog_id, matched=True, stream_count=0)
            return []

        files = [
            e
            for e in self._parser.parse(markup)
            if not e.is_directory and is_media_file(e.link)
        ]
        # guessit is CPU-bound; keep it off the event loop.
        files = await asyncio.to_thread(
            _filter_by_episode, files, request.season, request.episode
        )
        streams = [
            StreamItem(
                title=self._title(entry),
                url=join_listing_url(folder_url, entry.link),
                source_label=self._source_label,
            )
            for entry in files
        ]

        if not streams:
            log.info("stream_folder_empty", url=folder_url)
        else:
            log.info(
                "stream_resolved",
                content_type=request.content_type,
                id=request.raw_id,
                folder=link,
                streams=len(streams),
            )
        self._record(
            catalog_id=request.is_catalog_id, matched=True, stream_count=len(streams)
        )
        return streams

    async def _locate_folder(self, request: StreamRequest, root: str) -> str | None:
        """Relative link of the target folder, or None when nothing matches."""
        if request.folder_token is not None:
            return folder_link(request.folder_token)

        markup = await self._fetcher.fetch(root)
        if markup is None:
            log.warning("stream_root_unavailable", url=root)
            return None

        link = self._match(self._parser.parse(markup), request.search_term or "")
        if link is None:
            log.info(
                "stream_no_match",
                content_type=request.content_type,
                term=request.search_term,
            )
        return link

    def _title(self, entry: DirectoryEntry) -> str:
        if self._title_suffix:
            return f"{entry.name} {self._title_suffix}"
        return entry.name

    def _record(self, *, catalog_id: bool, matched: bool, stream_count: int) -> None:
        if self._metrics is not None:
            self._metrics.record_stream_lookup(
                catalog_id=catalog_id, matched=matched, stream_count=stream_count
            )
