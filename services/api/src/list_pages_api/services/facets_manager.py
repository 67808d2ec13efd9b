"""Facets manager: creates facets for a list source and builds their results."""

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from list_pages_shared.logging import get_logger

from ..exceptions import ConfigurationError, UnknownProcessorError, UnknownWidgetError
from .facets import Facet, FacetDefinition, Result
from .processors import PROCESSOR_TYPES, Processor, run_build_processors, run_sort_processors
from .widgets import WIDGET_TYPES, ListPagesWidget

if TYPE_CHECKING:
    from .list_source import ListResultSet

logger = get_logger(__name__)


class FacetsManager:
    """Registry of facet definitions and the latest counts per facet source.

    One manager lives for one request; results stored with
    ``update_results`` are only visible to facets built afterwards.
    """

    def __init__(
        self,
        definitions: Iterable[FacetDefinition],
        widget_types: Mapping[str, type[ListPagesWidget]] | None = None,
        processor_types: Mapping[str, type[Processor]] | None = None,
    ):
        self._definitions = list(definitions)
        self._widget_types = dict(widget_types or WIDGET_TYPES)
        self._processor_types = dict(processor_types or PROCESSOR_TYPES)
        self._facet_counts: dict[str, dict[str, dict[str, int]]] = {}

        seen: set[tuple[str, str]] = set()
        for definition in self._definitions:
            key = (definition.facet_source_id, definition.id)
            if key in seen:
                raise ConfigurationError(
                    f"Duplicate facet '{definition.id}' on {definition.facet_source_id}"
                )
            seen.add(key)

    @property
    def widget_types(self) -> dict[str, type[ListPagesWidget]]:
        """Widget id to widget class, as configured for this manager."""
        return dict(self._widget_types)

    def get_definitions(self, search_id: str) -> list[FacetDefinition]:
        """Definitions of every facet attached to a facet source."""
        return [d for d in self._definitions if d.facet_source_id == search_id]

    def get_facets_by_facet_source_id(self, search_id: str) -> list[Facet]:
        """Fresh facet objects for a facet source, in definition order."""
        return [self._create_facet(d) for d in self.get_definitions(search_id)]

    def get_available_filters(self, search_id: str) -> dict[str, str]:
        """Facet id to label for a facet source."""
        return {d.id: d.name for d in self.get_definitions(search_id)}

    def update_results(self, search_id: str, result_set: "ListResultSet") -> None:
        """Store the facet counts of an executed query for later builds."""
        self._facet_counts[search_id] = {
            facet_id: dict(counts) for facet_id, counts in result_set.facet_counts.items()
        }

    def build(self, facet: Facet) -> list[Result]:
        """Compute a facet's results from the stored counts.

        Counts become results, then build processors and sort processors run
        in weight order. The outcome is also stored on ``facet.results``.

        Raises:
            InvalidProcessorError: If a processor lacks the capability of a
                stage it declares.
        """
        counts = self._facet_counts.get(facet.facet_source_id, {}).get(facet.id, {})
        active = set(facet.active_items)
        results = [
            Result(raw_value=value, display_value=value, count=count, active=value in active)
            for value, count in counts.items()
        ]
        results = run_build_processors(facet, results)
        results = run_sort_processors(facet, results)
        facet.results = results

        logger.debug(
            "Built facet",
            facet_id=facet.id,
            facet_source_id=facet.facet_source_id,
            result_count=len(results),
        )
        return results

    def _create_facet(self, definition: FacetDefinition) -> Facet:
        widget_cls = self._widget_types.get(definition.widget)
        if widget_cls is None:
            raise UnknownWidgetError(
                f"Facet '{definition.id}' uses unknown widget '{definition.widget}'"
            )

        processors: list[Processor] = []
        for config in definition.processors:
            processor_cls = self._processor_types.get(config.id)
            if processor_cls is None:
                raise UnknownProcessorError(
                    f"Facet '{definition.id}' uses unknown processor '{config.id}'"
                )
            processors.append(processor_cls(config.id, weight=config.weight, settings=config.settings))

        return Facet(definition, widget_cls(), processors)
