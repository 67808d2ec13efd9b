"""API services package."""

from .entity_metadata import EntityMetadataService
from .facets_manager import FacetsManager
from .list_execution_manager import ListExecutionManager
from .list_page_service import ListPageService
from .list_source import ListSourceFactory, SqlListSource
from .preset_filters_builder import ListPresetFiltersBuilder

__all__ = [
    "EntityMetadataService",
    "FacetsManager",
    "ListExecutionManager",
    "ListPageService",
    "ListPresetFiltersBuilder",
    "ListSourceFactory",
    "SqlListSource",
]
