"""Facet processors: pluggable steps that compute and order facet results."""

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from ..exceptions import InvalidProcessorError
from .facets import Result

if TYPE_CHECKING:
    from .facets import Facet

STAGE_BUILD = "build"
STAGE_SORT = "sort"


class Processor:
    """Base class for facet processors.

    ``stages`` declares the stages a processor takes part in. Each stage has
    a capability class (``BuildProcessor``, ``SortProcessor``) that a
    processor must implement to participate in it.
    """

    stages: frozenset[str] = frozenset()

    def __init__(
        self,
        processor_id: str,
        weight: int = 0,
        settings: dict[str, Any] | None = None,
    ):
        self.processor_id = processor_id
        self.weight = weight
        self.settings = settings or {}

    def supports_stage(self, stage: str) -> bool:
        """Whether this processor declares participation in a stage."""
        return stage in self.stages


class BuildProcessor(Processor, ABC):
    """Capability of processors taking part in the build stage."""

    stages = frozenset({STAGE_BUILD})

    @abstractmethod
    def build(self, facet: "Facet", results: list[Result]) -> list[Result]:
        """Return the facet results after this processor's changes."""


class SortProcessor(Processor, ABC):
    """Capability of processors taking part in the sort stage."""

    stages = frozenset({STAGE_SORT})

    @abstractmethod
    def sort_results(self, facet: "Facet", results: list[Result]) -> list[Result]:
        """Return the facet results in display order."""


class ActiveItemsProcessor(BuildProcessor):
    """Makes sure every active item has a result and flags the active ones."""

    def build(self, facet: "Facet", results: list[Result]) -> list[Result]:
        active = set(facet.active_items)
        processed = [replace(result, active=result.raw_value in active) for result in results]
        known = {result.raw_value for result in processed}
        for item in facet.active_items:
            if item and item not in known:
                processed.append(Result(raw_value=item, display_value=item, active=True))
                known.add(item)
        return processed


class ValueLabelProcessor(BuildProcessor):
    """Replaces raw values with the labels configured in ``settings.labels``."""

    def build(self, facet: "Facet", results: list[Result]) -> list[Result]:
        labels: dict[str, str] = self.settings.get("labels", {})
        return [
            replace(result, display_value=labels.get(result.raw_value, result.display_value))
            for result in results
        ]


class CountSortProcessor(SortProcessor):
    """Orders results by count, then alphabetically by label."""

    def sort_results(self, facet: "Facet", results: list[Result]) -> list[Result]:
        ascending = self.settings.get("order", "desc") == "asc"
        return sorted(
            results,
            key=lambda result: (
                result.count if ascending else -result.count,
                result.display_value.lower(),
            ),
        )


PROCESSOR_TYPES: dict[str, type[Processor]] = {
    "active_items": ActiveItemsProcessor,
    "value_labels": ValueLabelProcessor,
    "count_sort": CountSortProcessor,
}


def run_build_processors(facet: "Facet", results: list[Result]) -> list[Result]:
    """Run every build-stage processor of a facet over ``results``.

    Raises:
        InvalidProcessorError: If a processor declares the build stage but
            does not implement ``BuildProcessor``.
    """
    for processor in facet.get_processors_by_stage(STAGE_BUILD):
        if not isinstance(processor, BuildProcessor):
            raise InvalidProcessorError(
                f"The processor {processor.processor_id} has a build definition but "
                "doesn't implement the required BuildProcessor interface"
            )
        results = processor.build(facet, results)
    return results


def run_sort_processors(facet: "Facet", results: list[Result]) -> list[Result]:
    """Run every sort-stage processor of a facet over ``results``.

    Raises:
        InvalidProcessorError: If a processor declares the sort stage but
            does not implement ``SortProcessor``.
    """
    for processor in facet.get_processors_by_stage(STAGE_SORT):
        if not isinstance(processor, SortProcessor):
            raise InvalidProcessorError(
                f"The processor {processor.processor_id} has a sort definition but "
                "doesn't implement the required SortProcessor interface"
            )
        results = processor.sort_results(facet, results)
    return results
