"""Business logic services."""
from encore.services.artists import ArtistRegistry
from encore.services.albums import AlbumRegistry
from encore.services.catalog import CatalogService, SaveResult, has_source
from encore.services.exceptions import InvalidTrackError
from encore.services.import_service import CSVImportService
from encore.services.search import CatalogSearchService

__all__ = [
    "ArtistRegistry",
    "AlbumRegistry",
    "CatalogService",
    "SaveResult",
    "has_source",
    "InvalidTrackError",
    "CSVImportService",
    "CatalogSearchService",
]
