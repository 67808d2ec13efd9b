"""Preset filter set and the per-round-trip edit session."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..exceptions import InvalidFilterValueError
from .form import FormState

# Names shared with the client side of the round trip
PRESET_FILTERS_WRAPPER = "preset_filters_wrapper"
FORM_KEY_MARKER = "list_pages_form_key"
SET_DEFAULT_FILTER = "set-default-filter"
REMOVE_DEFAULT_FILTER = "remove-default-filter"
ADD_NEW_FILTER = "preset-filter-add-new"


def normalize_filter_value(value: Any) -> list[str]:
    """Normalize a scalar or sequence filter value to a list of strings.

    Positions are preserved (an empty bound of a date range stays an empty
    string), but a missing or empty scalar becomes an empty list.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return ["" if item is None else str(item) for item in value]
    if value == "":
        return []
    return [str(value)]


class PresetFilterSet:
    """Mapping of facet id to the raw values pinned for that facet."""

    def __init__(self, filters: Mapping[str, Any] | None = None):
        self._filters: dict[str, list[str]] = {}
        for filter_key, value in (filters or {}).items():
            self.set(filter_key, value)

    def set(self, filter_key: str, value: Any) -> None:
        """Pin a value for a filter, replacing any previous value."""
        self._filters[filter_key] = normalize_filter_value(value)

    def remove(self, filter_key: str) -> bool:
        """Unpin a filter. Removing a filter that is not pinned is a no-op.

        Returns:
            True if the filter was pinned.
        """
        return self._filters.pop(filter_key, None) is not None

    def get(self, filter_key: str, default: list[str] | None = None) -> list[str] | None:
        return self._filters.get(filter_key, default)

    def keys(self):
        return self._filters.keys()

    def items(self):
        return self._filters.items()

    def copy(self) -> "PresetFilterSet":
        return PresetFilterSet(self._filters)

    def as_dict(self) -> dict[str, list[str]]:
        """Plain dict copy suitable for persistence and form values."""
        return {key: list(value) for key, value in self._filters.items()}

    def __contains__(self, filter_key: object) -> bool:
        return filter_key in self._filters

    def __iter__(self) -> Iterator[str]:
        return iter(self._filters)

    def __len__(self) -> int:
        return len(self._filters)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PresetFilterSet):
            return self._filters == other._filters
        if isinstance(other, Mapping):
            return self._filters == PresetFilterSet(other)._filters
        return NotImplemented

    def __repr__(self) -> str:
        return f"PresetFilterSet({self._filters!r})"


class SessionMode(StrEnum):
    """Which view the preset filter builder renders."""

    SUMMARY = "summary"
    EDITING = "editing"


@dataclass(frozen=True)
class EditSession:
    """State of one preset filter builder round trip.

    Built once from the submitted form state and passed explicitly through
    the builder. ``current_filters`` is this round trip's working copy and is
    mutated by the set/remove actions.
    """

    form_key: str
    trigger: str | None
    filter_key: str | None
    selected_filter: str | None
    current_filters: PresetFilterSet

    @classmethod
    def from_form_state(
        cls,
        form_state: FormState,
        form_key: str,
        preset_filters: Mapping[str, Any] | PresetFilterSet | None = None,
    ) -> "EditSession":
        """Reconstruct the session from submitted values.

        The submitted ``current_filters`` wins over the committed presets so
        that uncommitted edits survive between round trips.
        """
        submitted = form_state.get_value(PRESET_FILTERS_WRAPPER, "current_filters")
        if submitted is not None and not isinstance(submitted, Mapping):
            raise InvalidFilterValueError("current_filters must map filter keys to values")
        if submitted is not None:
            current_filters = PresetFilterSet(submitted)
        elif isinstance(preset_filters, PresetFilterSet):
            current_filters = preset_filters.copy()
        else:
            current_filters = PresetFilterSet(preset_filters)

        filter_key = form_state.get_value(PRESET_FILTERS_WRAPPER, "edit", "filter_key")
        selected_filter = form_state.get_value(PRESET_FILTERS_WRAPPER, "summary", "add_new")

        return cls(
            form_key=form_key,
            trigger=form_state.triggering_element,
            filter_key=filter_key if isinstance(filter_key, str) and filter_key else None,
            selected_filter=selected_filter if isinstance(selected_filter, str) and selected_filter else None,
            current_filters=current_filters,
        )

    @property
    def mode(self) -> SessionMode:
        """Summary unless a filter was picked for editing."""
        return SessionMode.EDITING if self.selected_filter else SessionMode.SUMMARY
