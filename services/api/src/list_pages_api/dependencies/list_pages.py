"""Request-scoped services for list page routes.

FastAPI caches dependency results per request, so every consumer within one
request shares the same facets manager, list source factory and list
execution manager.
"""

from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from list_pages_shared.db.connection import get_session
from list_pages_shared.db.models import ListPage

from ..services.entity_metadata import EntityMetadataService
from ..services.facets_manager import FacetsManager
from ..services.list_execution_manager import ListExecutionManager, ListRequestContext
from ..services.list_page_service import ListPageService
from ..services.list_source import ListSourceFactory
from ..services.preset_filters_builder import ListPresetFiltersBuilder


def get_facets_manager(request: Request) -> FacetsManager:
    """Facets manager over the definitions loaded at startup."""
    return FacetsManager(getattr(request.app.state, "facet_definitions", []))


def get_entity_metadata(session: AsyncSession = Depends(get_session)) -> EntityMetadataService:
    return EntityMetadataService(session)


def get_list_source_factory(
    session: AsyncSession = Depends(get_session),
    facets_manager: FacetsManager = Depends(get_facets_manager),
    entity_metadata: EntityMetadataService = Depends(get_entity_metadata),
) -> ListSourceFactory:
    return ListSourceFactory(session, facets_manager, entity_metadata)


def get_request_context(request: Request) -> ListRequestContext:
    """Page and visitor filters from the query string."""
    return ListRequestContext.from_query_params(request.query_params)


def get_list_execution_manager(
    list_source_factory: ListSourceFactory = Depends(get_list_source_factory),
    entity_metadata: EntityMetadataService = Depends(get_entity_metadata),
    request_context: ListRequestContext = Depends(get_request_context),
) -> ListExecutionManager:
    return ListExecutionManager(list_source_factory, entity_metadata, request_context)


def get_preset_filters_builder(
    facets_manager: FacetsManager = Depends(get_facets_manager),
) -> ListPresetFiltersBuilder:
    return ListPresetFiltersBuilder(facets_manager)


def get_list_page_service(session: AsyncSession = Depends(get_session)) -> ListPageService:
    return ListPageService(session)


async def get_list_page_or_404(
    list_page_id: UUID,
    service: ListPageService = Depends(get_list_page_service),
) -> ListPage:
    """Load the list page named in the path."""
    page = await service.get_list_page(list_page_id)
    if page is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"List page {list_page_id} not found",
        )
    return page
