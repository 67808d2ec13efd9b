"""Request-scoped execution of list page queries."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from list_pages_shared.db.models import ListPage
from list_pages_shared.logging import get_logger

from ..models.preset_filters import PresetFilterSet
from .entity_metadata import EntityMetadataService
from .list_source import ListResultSet, ListSource, ListSourceFactory, Query

logger = get_logger(__name__)

DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class ListPageWrapper:
    """Read-only view of a list page's list configuration."""

    list_page_id: UUID
    source_entity_type: str | None
    source_bundle: str | None
    preset_filters: PresetFilterSet = field(default_factory=PresetFilterSet)

    @classmethod
    def from_list_page(cls, page: ListPage) -> "ListPageWrapper":
        return cls(
            list_page_id=page.list_page_id,
            source_entity_type=page.source_entity_type,
            source_bundle=page.source_bundle,
            preset_filters=PresetFilterSet(page.preset_filters or {}),
        )

    @property
    def is_configured(self) -> bool:
        """Whether a collection has been chosen."""
        return bool(self.source_entity_type and self.source_bundle)


@dataclass(frozen=True)
class ListRequestContext:
    """Page number and visitor filters of the current request."""

    page: int = 0
    active_filters: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_query_params(cls, params: Mapping[str, Any]) -> "ListRequestContext":
        """Parse ``page`` and repeated ``f=facet:value`` parameters.

        A missing, negative or non-numeric page is page 0. Filters without a
        ``:`` separator are ignored.
        """
        try:
            page = max(int(params.get("page", 0)), 0)
        except (TypeError, ValueError):
            page = 0

        if hasattr(params, "getlist"):
            raw_filters = params.getlist("f")
        else:
            raw_filters = params.get("f") or []
            if isinstance(raw_filters, str):
                raw_filters = [raw_filters]

        active_filters: dict[str, list[str]] = {}
        for raw_filter in raw_filters:
            facet_id, separator, value = raw_filter.partition(":")
            if not separator or not facet_id:
                continue
            active_filters.setdefault(facet_id, []).append(value)

        return cls(page=page, active_filters=active_filters)


@dataclass(frozen=True)
class ListExecutionResult:
    """An executed list: the query, its results, source and configuration."""

    query: Query
    result: ListResultSet
    list_source: ListSource
    configuration: ListPageWrapper


class ListExecutionManager:
    """Executes list page queries at most once per list page per request.

    An instance must not outlive the request it was created for; the
    executed results are memoized on the instance.
    """

    def __init__(
        self,
        list_source_factory: ListSourceFactory,
        entity_metadata: EntityMetadataService,
        request_context: ListRequestContext,
        limit: int = DEFAULT_LIMIT,
    ):
        self.list_source_factory = list_source_factory
        self.entity_metadata = entity_metadata
        self.request_context = request_context
        self.limit = limit
        self._executed: dict[UUID, ListExecutionResult] = {}

    async def execute_list(self, item: ListPage) -> ListExecutionResult | None:
        """Execute the list of a list page.

        Args:
            item: The list page.

        Returns:
            The execution result, or None when the page has no usable list
            source. None results are not memoized.
        """
        executed = self._executed.get(item.list_page_id)
        if executed is not None:
            return executed

        configuration = ListPageWrapper.from_list_page(item)
        if not configuration.is_configured:
            logger.debug("List page has no list configured", list_page_id=str(item.list_page_id))
            return None

        list_source = await self.list_source_factory.get(
            configuration.source_entity_type, configuration.source_bundle
        )
        if list_source is None:
            logger.info(
                "List page source unavailable",
                list_page_id=str(item.list_page_id),
                entity_type=configuration.source_entity_type,
                bundle=configuration.source_bundle,
            )
            return None

        default_sort = await self.entity_metadata.get_default_sort(
            configuration.source_entity_type, configuration.source_bundle
        )
        sort = default_sort.as_query_sort() if default_sort else {}

        query = list_source.get_query(
            limit=self.limit,
            page=self.request_context.page,
            sort=sort,
            preset_filters=configuration.preset_filters,
            active_filters=self.request_context.active_filters,
        )
        result = await query.execute()

        executed = ListExecutionResult(
            query=query,
            result=result,
            list_source=list_source,
            configuration=configuration,
        )
        self._executed[item.list_page_id] = executed

        logger.info(
            "Executed list",
            list_page_id=str(item.list_page_id),
            search_id=list_source.get_search_id(),
            page=self.request_context.page,
            total_count=result.total_count,
        )
        return executed
