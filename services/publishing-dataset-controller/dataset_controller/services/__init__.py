from .catalogue_service import DatasetCatalogueService
from .metadata_service import MetadataService

__all__ = ["DatasetCatalogueService", "MetadataService"]
