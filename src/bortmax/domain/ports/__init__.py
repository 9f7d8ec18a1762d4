from .cache import CatalogCachePort
from .listing_fetcher import ListingFetcherPort
from .listing_parser import ListingParserPort

__all__ = [
    "CatalogCachePort",
    "ListingFetcherPort",
    "ListingParserPort",
]
