"""List sources: queryable collections of content of one entity type and bundle."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from list_pages_shared.db.models import BundleSettings, ContentEntity, ContentFieldValue
from list_pages_shared.logging import get_logger

from ..models.preset_filters import PresetFilterSet
from .entity_metadata import EntityMetadataService
from .facets import FacetDefinition
from .facets_manager import FacetsManager
from .widgets import WIDGET_TYPES, ListPagesWidget, parse_date

logger = get_logger(__name__)

SEARCH_ID_PREFIX = "list_facet_source"

SORT_COLUMNS = {
    "title": ContentEntity.title,
    "created": ContentEntity.created_at,
    "changed": ContentEntity.updated_at,
}

DATE_COLUMNS = {
    "created": ContentEntity.created_at,
    "changed": ContentEntity.updated_at,
}


def build_search_id(entity_type: str, bundle: str) -> str:
    """Facet source id of the list of one entity type and bundle."""
    return f"{SEARCH_ID_PREFIX}:{entity_type}:{bundle}"


@dataclass
class ListResultSet:
    """Outcome of an executed list query."""

    items: list[ContentEntity]
    total_count: int
    # facet id -> raw value -> number of matching items
    facet_counts: dict[str, dict[str, int]] = field(default_factory=dict)


class Query(Protocol):
    """An executable list query."""

    limit: int | None
    page: int
    sort: dict[str, str]
    filters: PresetFilterSet

    async def execute(self) -> ListResultSet: ...


class ListSource(Protocol):
    """A collection that can produce queries and advertise its filters."""

    entity_type: str
    bundle: str

    def get_search_id(self) -> str: ...

    def get_available_filters(self) -> dict[str, str]: ...

    def get_query(
        self,
        limit: int | None = None,
        page: int = 0,
        sort: Mapping[str, str] | None = None,
        preset_filters: PresetFilterSet | Mapping[str, Any] | None = None,
        active_filters: Mapping[str, Any] | None = None,
    ) -> Query: ...


class ListQuery:
    """Query over published content of one bundle.

    Values of one facet are OR-ed, different facets are AND-ed. Preset
    filters replace active filters on the same facet.
    """

    def __init__(
        self,
        session: AsyncSession,
        entity_type: str,
        bundle: str,
        definitions: Sequence[FacetDefinition],
        limit: int | None = None,
        page: int = 0,
        sort: Mapping[str, str] | None = None,
        filters: PresetFilterSet | None = None,
        widget_types: Mapping[str, type[ListPagesWidget]] | None = None,
    ):
        self.session = session
        self.entity_type = entity_type
        self.bundle = bundle
        self.definitions = {definition.id: definition for definition in definitions}
        self.limit = limit
        self.page = max(page, 0)
        self.sort = dict(sort or {})
        self.filters = filters or PresetFilterSet()
        self.widget_types = dict(widget_types or WIDGET_TYPES)

    def build_statement(self) -> Select:
        """Filtered statement without sorting or pagination."""
        query = select(ContentEntity).where(
            ContentEntity.entity_type == self.entity_type,
            ContentEntity.bundle == self.bundle,
            ContentEntity.status.is_(True),
        )

        for facet_id, values in self.filters.items():
            definition = self.definitions.get(facet_id)
            if definition is None:
                logger.warning("Ignoring filter without facet", facet_id=facet_id, bundle=self.bundle)
                continue
            query = self._apply_filter(query, definition, values)

        return query

    async def execute(self) -> ListResultSet:
        """Run the query, its total count and the facet counts."""
        base = self.build_statement()

        count_query = select(func.count()).select_from(base.subquery())
        total_result = await self.session.execute(count_query)
        total_count = total_result.scalar() or 0

        query = self._apply_sort(base)
        if self.limit:
            query = query.offset(self.page * self.limit).limit(self.limit)

        result = await self.session.execute(query)
        items = list(result.scalars().all())

        facet_counts = await self._get_facet_counts(base)

        logger.debug(
            "Executed list query",
            entity_type=self.entity_type,
            bundle=self.bundle,
            page=self.page,
            total_count=total_count,
            filters=self.filters.as_dict(),
        )
        return ListResultSet(items=items, total_count=total_count, facet_counts=facet_counts)

    def _apply_filter(self, query: Select, definition: FacetDefinition, values: list[str]) -> Select:
        widget_cls = self.widget_types.get(definition.widget)
        if widget_cls is not None and widget_cls.query_type == "date":
            return self._apply_date_filter(query, definition, values)

        values = [value for value in values if value]
        if not values:
            return query

        subquery = select(ContentFieldValue.entity_id).where(
            ContentFieldValue.field_name == definition.field,
            ContentFieldValue.value.in_(values),
        )
        return query.where(ContentEntity.entity_id.in_(subquery))

    def _apply_date_filter(self, query: Select, definition: FacetDefinition, values: list[str]) -> Select:
        column = DATE_COLUMNS.get(definition.field)
        if column is None:
            logger.warning("Ignoring date filter on unknown field", facet_id=definition.id, field=definition.field)
            return query

        start, end = (list(values) + ["", ""])[:2]
        if start:
            query = query.where(column >= datetime.combine(parse_date(start), datetime.min.time()))
        if end:
            query = query.where(column <= datetime.combine(parse_date(end), datetime.max.time()))
        return query

    def _apply_sort(self, query: Select) -> Select:
        for name, direction in self.sort.items():
            column = SORT_COLUMNS.get(name)
            if column is None:
                logger.warning("Ignoring unknown sort", sort=name)
                continue
            if str(direction).upper() == "DESC":
                query = query.order_by(column.desc())
            else:
                query = query.order_by(column.asc())
        # Stable pagination
        return query.order_by(ContentEntity.entity_id)

    async def _get_facet_counts(self, base: Select) -> dict[str, dict[str, int]]:
        entity_ids = base.with_only_columns(ContentEntity.entity_id)
        facet_counts: dict[str, dict[str, int]] = {}

        for definition in self.definitions.values():
            widget_cls = self.widget_types.get(definition.widget)
            if widget_cls is not None and widget_cls.query_type != "string":
                continue

            result = await self.session.execute(
                select(
                    ContentFieldValue.value,
                    func.count(func.distinct(ContentFieldValue.entity_id)).label("count"),
                )
                .where(
                    ContentFieldValue.field_name == definition.field,
                    ContentFieldValue.entity_id.in_(entity_ids),
                )
                .group_by(ContentFieldValue.value)
            )
            facet_counts[definition.id] = {row.value: row.count for row in result.all()}

        return facet_counts


class SqlListSource:
    """List source backed by the content tables."""

    def __init__(
        self,
        session: AsyncSession,
        entity_type: str,
        bundle: str,
        definitions: Iterable[FacetDefinition],
        label: str | None = None,
        widget_types: Mapping[str, type[ListPagesWidget]] | None = None,
    ):
        self.session = session
        self.entity_type = entity_type
        self.bundle = bundle
        self.label = label or bundle
        self.definitions = tuple(definitions)
        self.widget_types = dict(widget_types or WIDGET_TYPES)

    def get_search_id(self) -> str:
        return build_search_id(self.entity_type, self.bundle)

    def get_available_filters(self) -> dict[str, str]:
        """Facet id to label of every facet of this source."""
        return {definition.id: definition.name for definition in self.definitions}

    def get_query(
        self,
        limit: int | None = None,
        page: int = 0,
        sort: Mapping[str, str] | None = None,
        preset_filters: PresetFilterSet | Mapping[str, Any] | None = None,
        active_filters: Mapping[str, Any] | None = None,
    ) -> ListQuery:
        """Build a query over this source.

        Args:
            limit: Items per page, None for no limit.
            page: 0-indexed page number.
            sort: Sort name to direction ("ASC" or "DESC").
            preset_filters: Filters pinned by the list configuration.
            active_filters: Filters chosen by the visitor.
        """
        filters = PresetFilterSet(active_filters)
        for filter_key, value in (preset_filters or {}).items():
            filters.set(filter_key, value)

        return ListQuery(
            self.session,
            self.entity_type,
            self.bundle,
            self.definitions,
            limit=limit,
            page=page,
            sort=sort,
            filters=filters,
            widget_types=self.widget_types,
        )

    def __repr__(self) -> str:
        return f"SqlListSource({self.get_search_id()!r})"


class ListSourceFactory:
    """Resolves list sources by entity type and bundle for one request."""

    def __init__(
        self,
        session: AsyncSession,
        facets_manager: FacetsManager,
        entity_metadata: EntityMetadataService | None = None,
    ):
        self.session = session
        self.facets_manager = facets_manager
        self.entity_metadata = entity_metadata or EntityMetadataService(session)
        self._sources: dict[tuple[str, str], SqlListSource | None] = {}

    async def get(self, entity_type: str, bundle: str) -> SqlListSource | None:
        """Get the list source of a bundle.

        Returns:
            The list source, or None if the bundle is unknown or has list
            pages disabled.
        """
        key = (entity_type, bundle)
        if key in self._sources:
            return self._sources[key]

        settings = await self.entity_metadata.get_bundle_settings(entity_type, bundle)
        if settings is None or not settings.list_pages_enabled:
            logger.info("No list source for bundle", entity_type=entity_type, bundle=bundle)
            source = None
        else:
            source = SqlListSource(
                self.session,
                entity_type,
                bundle,
                self.facets_manager.get_definitions(build_search_id(entity_type, bundle)),
                label=settings.label,
                widget_types=self.facets_manager.widget_types,
            )

        self._sources[key] = source
        return source

    async def get_available_lists(self) -> list[BundleSettings]:
        """Settings of every bundle with list pages enabled."""
        result = await self.session.execute(
            select(BundleSettings)
            .where(BundleSettings.list_pages_enabled.is_(True))
            .order_by(BundleSettings.entity_type, BundleSettings.bundle)
        )
        return list(result.scalars().all())
