from .listing import (
    CONTENT_TYPES,
    CacheEntry,
    CatalogItem,
    ContentType,
    DirectoryEntry,
    StreamItem,
    StreamRequest,
)

__all__ = [
    "CONTENT_TYPES",
    "CacheEntry",
    "CatalogItem",
    "ContentType",
    "DirectoryEntry",
    "StreamItem",
    "StreamRequest",
]
