"""List page service for creating and configuring list pages."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from list_pages_shared.db.models import ListPage, generate_uuid
from list_pages_shared.logging import get_logger

from ..exceptions import UnknownFilterError
from ..models.list_page import ListPageCreateRequest
from ..models.preset_filters import PresetFilterSet
from .list_source import ListSource, build_search_id

logger = get_logger(__name__)


class ListPageService:
    """Service for list page persistence."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_list_page(self, list_page_id: UUID) -> ListPage | None:
        result = await self.session.execute(
            select(ListPage).where(ListPage.list_page_id == list_page_id)
        )
        return result.scalar_one_or_none()

    async def create_list_page(self, request: ListPageCreateRequest) -> ListPage:
        page = ListPage(
            list_page_id=generate_uuid(),
            title=request.title,
            source_entity_type=request.source_entity_type,
            source_bundle=request.source_bundle,
            preset_filters={},
        )
        self.session.add(page)
        await self.session.flush()

        logger.info("Created list page", list_page_id=str(page.list_page_id), title=page.title)
        return page

    async def update_configuration(
        self,
        page: ListPage,
        source_entity_type: str | None,
        source_bundle: str | None,
        preset_filters: PresetFilterSet | None,
        list_source: ListSource | None,
    ) -> ListPage:
        """Commit a list configuration.

        Args:
            page: List page to update.
            source_entity_type: New entity type, None to unset.
            source_bundle: New bundle, None to unset.
            preset_filters: Filters to commit. None keeps the current ones
                unless the source changes.
            list_source: Resolved source of the new configuration.

        Raises:
            UnknownFilterError: If a preset filter is not a facet of the source.
        """
        source_changed = (page.source_entity_type, page.source_bundle) != (
            source_entity_type,
            source_bundle,
        )
        if preset_filters is None:
            preset_filters = PresetFilterSet() if source_changed else PresetFilterSet(page.preset_filters)

        available_filters = list_source.get_available_filters() if list_source else {}
        search_id = (
            list_source.get_search_id()
            if list_source
            else build_search_id(source_entity_type or "", source_bundle or "")
        )
        for filter_key in preset_filters:
            if filter_key not in available_filters:
                raise UnknownFilterError(filter_key, search_id)

        page.source_entity_type = source_entity_type
        page.source_bundle = source_bundle
        page.preset_filters = preset_filters.as_dict()
        await self.session.flush()

        logger.info(
            "Updated list configuration",
            list_page_id=str(page.list_page_id),
            search_id=search_id,
            preset_filters=page.preset_filters,
        )
        return page
