"""Facet definitions and the transient facet objects built from them."""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field

from ..models.preset_filters import normalize_filter_value

if TYPE_CHECKING:
    from .processors import Processor
    from .widgets import ListPagesWidget


class ProcessorConfig(BaseModel):
    """A processor enabled on a facet."""

    id: str = Field(description="Processor type id")
    weight: int = Field(default=0, description="Lower weights run first")
    settings: dict[str, Any] = Field(default_factory=dict, description="Processor settings")


class FacetDefinition(BaseModel):
    """Configuration of one filterable dimension of a list source."""

    id: str = Field(description="Facet id, unique within its facet source")
    name: str = Field(description="Human readable label")
    facet_source_id: str = Field(description="Search id of the list source")
    field: str = Field(description="Content field the facet filters on")
    widget: str = Field(default="multiselect", description="Widget type id")
    processors: list[ProcessorConfig] = Field(default_factory=list)


class FacetDefinitionFile(BaseModel):
    """Top-level layout of a facet definitions YAML file."""

    facets: list[FacetDefinition] = Field(default_factory=list)


def load_facet_definitions(path: str | Path) -> list[FacetDefinition]:
    """Load facet definitions from a YAML file.

    Args:
        path: Path to a file with a top-level ``facets`` list.

    Returns:
        The validated definitions, in file order.
    """
    with open(path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return FacetDefinitionFile.model_validate(data).facets


@dataclass(frozen=True)
class Result:
    """One value of a facet with its human readable label."""

    raw_value: str
    display_value: str
    count: int = 0
    active: bool = False


class Facet:
    """A facet bound to a list source for the duration of one build pass.

    Facets are created fresh from their definitions on every lookup, so
    mutating results or active items never leaks into another pass.
    """

    def __init__(
        self,
        definition: FacetDefinition,
        widget: "ListPagesWidget",
        processors: list["Processor"],
    ):
        self.definition = definition
        self.widget = widget
        self._processors = sorted(processors, key=lambda processor: processor.weight)
        self.results: list[Result] = []
        self._active_items: list[str] = []

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def field(self) -> str:
        return self.definition.field

    @property
    def facet_source_id(self) -> str:
        return self.definition.facet_source_id

    @property
    def active_items(self) -> list[str]:
        """The raw values currently selected on this facet."""
        return self._active_items

    @active_items.setter
    def active_items(self, values: Any) -> None:
        self._active_items = normalize_filter_value(values)

    def get_processors_by_stage(self, stage: str) -> list["Processor"]:
        """Processors participating in a stage, ordered by weight."""
        return [processor for processor in self._processors if processor.supports_stage(stage)]

    def __repr__(self) -> str:
        return f"Facet(id={self.id!r}, facet_source_id={self.facet_source_id!r})"
