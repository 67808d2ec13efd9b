"""List pages widgets.

A widget renders a facet as a form input, converts the submitted input back
into raw filter values and labels pinned values for the preset filter
summary.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import TYPE_CHECKING, Any

from ..exceptions import InvalidFilterValueError
from ..models.form import FormElement, FormState
from ..models.preset_filters import PRESET_FILTERS_WRAPPER, normalize_filter_value

if TYPE_CHECKING:
    from .facets import Facet
    from .list_source import ListSource


class ListPagesWidget(ABC):
    """Base class for facet widgets usable in the preset filter builder."""

    # Either "string" (match field values) or "date" (range on a timestamp)
    query_type = "string"

    def __init__(self, settings: dict[str, Any] | None = None):
        self.settings = settings or {}

    @abstractmethod
    def build(self, facet: "Facet") -> FormElement:
        """Render the facet's results as an input element."""

    def build_default_values_widget(
        self,
        facet: "Facet",
        list_source: "ListSource | None" = None,
        parents: list[str] | None = None,
    ) -> FormElement | None:
        """Render the input used to pick a facet's default value.

        Args:
            facet: Facet with its results already built.
            list_source: List source the facet belongs to.
            parents: Value path the submitted input must land at.

        Returns:
            The input element, or None when the facet cannot be edited.
        """
        element = self.build(facet)
        element.parents = list(parents or [])
        return element

    def get_default_values_label(
        self,
        facet: "Facet",
        list_source: "ListSource | None",
        filter_value: list[str],
    ) -> str:
        """Human readable label for a pinned value."""
        return ", ".join(value for value in filter_value if value)

    @abstractmethod
    def prepare_value_for_url(
        self,
        facet: "Facet",
        form: FormElement,
        form_state: FormState,
    ) -> list[str]:
        """Convert the submitted input into raw filter values."""

    def get_value_from_active_filters(self, facet: "Facet", key: str) -> str | None:
        """Read one active value by its position."""
        try:
            return facet.active_items[int(key)]
        except (ValueError, IndexError):
            return None

    def submitted_value(self, facet: "Facet", form_state: FormState) -> Any:
        return form_state.get_value(PRESET_FILTERS_WRAPPER, "edit", facet.id)

    def result_options(self, facet: "Facet") -> dict[str, str]:
        return {result.raw_value: result.display_value for result in facet.results}


class SelectWidget(ListPagesWidget):
    """Single value dropdown."""

    def build(self, facet: "Facet") -> FormElement:
        return FormElement(
            type="select",
            title=facet.name,
            options={"": "- Any -", **self.result_options(facet)},
            default_value=self.get_value_from_active_filters(facet, "0") or "",
        )

    def prepare_value_for_url(
        self,
        facet: "Facet",
        form: FormElement,
        form_state: FormState,
    ) -> list[str]:
        values = [value for value in normalize_filter_value(self.submitted_value(facet, form_state)) if value]
        return values[:1]


class MultiselectWidget(ListPagesWidget):
    """Dropdown allowing several values."""

    def build(self, facet: "Facet") -> FormElement:
        return FormElement(
            type="select",
            title=facet.name,
            multiple=True,
            options=self.result_options(facet),
            default_value=list(facet.active_items),
        )

    def prepare_value_for_url(
        self,
        facet: "Facet",
        form: FormElement,
        form_state: FormState,
    ) -> list[str]:
        return [value for value in normalize_filter_value(self.submitted_value(facet, form_state)) if value]


class DateRangeWidget(ListPagesWidget):
    """From/to date inputs. The filter value is ``[from, to]``, either may be empty."""

    query_type = "date"

    def build(self, facet: "Facet") -> FormElement:
        element = FormElement(type="container", title=facet.name)
        element["from"] = FormElement(
            type="date",
            title="From",
            default_value=self.get_value_from_active_filters(facet, "0") or "",
        )
        element["to"] = FormElement(
            type="date",
            title="To",
            default_value=self.get_value_from_active_filters(facet, "1") or "",
        )
        return element

    def prepare_value_for_url(
        self,
        facet: "Facet",
        form: FormElement,
        form_state: FormState,
    ) -> list[str]:
        submitted = self.submitted_value(facet, form_state)
        if isinstance(submitted, dict):
            bounds = [submitted.get("from") or "", submitted.get("to") or ""]
        else:
            bounds = (normalize_filter_value(submitted) + ["", ""])[:2]

        for bound in bounds:
            if bound:
                parse_date(bound)

        if not any(bounds):
            return []
        return bounds

    def get_default_values_label(
        self,
        facet: "Facet",
        list_source: "ListSource | None",
        filter_value: list[str],
    ) -> str:
        start, end = (list(filter_value) + ["", ""])[:2]
        if start and end:
            return f"{start} - {end}"
        if start:
            return f"From {start}"
        if end:
            return f"Until {end}"
        return ""


def parse_date(value: str) -> date:
    """Parse an ISO date filter bound.

    Raises:
        InvalidFilterValueError: If the value is not an ISO 8601 date.
    """
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidFilterValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


WIDGET_TYPES: dict[str, type[ListPagesWidget]] = {
    "select": SelectWidget,
    "multiselect": MultiselectWidget,
    "date_range": DateRangeWidget,
}
