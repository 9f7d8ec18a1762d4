"""Best-effort folder lookup for ids our catalog never issued.

Case-insensitive substring containment against directory names; the first
hit in upstream listing order wins. No scoring, no tie-breaking: "alien"
matches "Alien 1979/" before "Aliens 1986/" only because it is listed first.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from bortmax.domain.entities.listing import DirectoryEntry
from bortmax.domain.identifiers import normalize_search_term

log = structlog.get_logger(__name__)


def match_folder(entries: Sequence[DirectoryEntry], search_term: str) -> str | None:
    """Return the link of the first directory whose name contains *search_term*."""
    needle = normalize_search_term(search_term).casefold()
    if not needle:
        return None

    for entry in entries:
        if entry.is_directory and needle in entry.name.casefold():
            log.debug("folder_matched", term=search_term, link=entry.link)
            return entry.link

    log.debug("folder_not_matched", term=search_term, candidates=len(entries))
    return None
