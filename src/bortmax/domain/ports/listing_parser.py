"""Port for turning autoindex markup into directory entries."""

from __future__ import annotations

from typing import Protocol

from bortmax.domain.entities.listing import DirectoryEntry


class ListingParserPort(Protocol):
    """Parse raw markup into entries, in upstream order.

    Parent-directory links and rows without a usable link or display
    text are dropped. Malformed markup yields fewer entries, not errors.
    """

    def parse(self, markup: str) -> list[DirectoryEntry]: ...
