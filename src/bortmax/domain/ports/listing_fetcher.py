"""Port for fetching raw directory-listing markup."""

from __future__ import annotations

from typing import Protocol


class ListingFetcherPort(Protocol):
    """Single bounded GET against a directory URL (must end with ``/``).

    Returns the response body on success and ``None`` on any failure
    (timeout, connection error, non-2xx). Never raises.
    """

    async def fetch(self, url: str) -> str | None: ...
