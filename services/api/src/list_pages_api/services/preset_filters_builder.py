"""Preset filter builder.

Renders the editor-facing form used to pin default values on the facets of
a list. Each round trip is one call to ``build_default_filters``; the
in-progress filter set travels with the submitted form values, so nothing
is held on the builder between calls.
"""

from collections.abc import Callable, Mapping
from typing import Any

from list_pages_shared.logging import get_logger

from ..exceptions import InvalidFilterValueError
from ..models.form import AjaxSettings, FormElement, FormState
from ..models.preset_filters import (
    ADD_NEW_FILTER,
    FORM_KEY_MARKER,
    PRESET_FILTERS_WRAPPER,
    REMOVE_DEFAULT_FILTER,
    SET_DEFAULT_FILTER,
    EditSession,
    PresetFilterSet,
    SessionMode,
)
from .facets import Facet
from .facets_manager import FacetsManager
from .list_source import ListSource
from .processors import run_build_processors

logger = get_logger(__name__)

FACET_REFRESH_LIMIT = 1

FormCallback = Callable[[FormElement, FormState], FormElement]


class ListPresetFiltersBuilder:
    """Builds the summary and edit views of the preset filter form."""

    def __init__(self, facets_manager: FacetsManager):
        self.facets_manager = facets_manager

    async def build_default_filters(
        self,
        form: FormElement,
        form_state: FormState,
        form_key: str,
        list_source: ListSource | None = None,
        available_filters: Mapping[str, str] | None = None,
        preset_filters: PresetFilterSet | Mapping[str, Any] | None = None,
    ) -> FormElement:
        """Add the preset filter subtree to ``form[form_key]``.

        Args:
            form: Root form element.
            form_state: Submitted values and triggering element.
            form_key: Key of the container the subtree is attached to.
            list_source: Configured list source. Without one the form is
                returned unchanged.
            available_filters: Facet id to label of the filters that may be
                pinned.
            preset_filters: Previously committed preset filters.

        Returns:
            The form.

        Raises:
            InvalidProcessorError: If a pinned facet has a build processor
                without the build capability.
        """
        if list_source is None:
            return form

        available_filters = dict(available_filters or {})
        session = EditSession.from_form_state(form_state, form_key, preset_filters)

        form[FORM_KEY_MARKER] = FormElement(type="value", value=form_key)

        container = form.get(form_key)
        if container is None:
            container = FormElement(type="container")
            form[form_key] = container
        container.attributes.setdefault("id", f"{form_key}-wrapper")

        wrapper = FormElement(
            type="container",
            attributes={"id": f"{form_key}-default-filters"},
        )
        wrapper["label"] = FormElement(type="label", title="Default filter values")
        container[PRESET_FILTERS_WRAPPER] = wrapper

        self._apply_trigger(session, form, form_state, list_source)
        wrapper["current_filters"] = FormElement(type="value", value=session.current_filters.as_dict())

        if session.mode is SessionMode.SUMMARY:
            wrapper["summary"] = self._build_summary(
                session, list_source, available_filters, container.element_id
            )
        else:
            wrapper["edit"] = await self._build_edit(
                session, list_source, available_filters, container.element_id
            )

        return form

    def get_facet_by_id(self, list_source: ListSource, facet_id: str) -> Facet | None:
        """Find a facet of a list source by id."""
        for facet in self.facets_manager.get_facets_by_facet_source_id(list_source.get_search_id()):
            if facet.id == facet_id:
                return facet
        return None

    def edit_default_value(self, form: FormElement, form_state: FormState) -> FormElement:
        """Round-trip callback of the "add new" picker."""
        return self._get_refreshed_element(form, form_state)

    def set_default_values(self, form: FormElement, form_state: FormState) -> FormElement:
        """Round-trip callback of the set and remove buttons."""
        return self._get_refreshed_element(form, form_state)

    def ajax_callback_for(self, trigger: str | None) -> FormCallback | None:
        """The callback wired to a triggering element, if any."""
        callbacks: dict[str, FormCallback] = {
            ADD_NEW_FILTER: self.edit_default_value,
            SET_DEFAULT_FILTER: self.set_default_values,
            REMOVE_DEFAULT_FILTER: self.set_default_values,
        }
        return callbacks.get(trigger) if trigger else None

    def _get_refreshed_element(self, form: FormElement, form_state: FormState) -> FormElement:
        # The marker tells which builder instance on the page triggered the round trip
        form_key = form_state.get_value(FORM_KEY_MARKER)
        if not isinstance(form_key, str) or form_key not in form:
            # Stale or foreign marker: refresh the instance rendered in this pass
            form_key = form[FORM_KEY_MARKER].value if FORM_KEY_MARKER in form else None
        if form_key is None or form_key not in form:
            raise InvalidFilterValueError("The submitted form has no preset filters to refresh")

        element = form[form_key]
        wrapper = element.get(PRESET_FILTERS_WRAPPER)
        if wrapper is not None:
            wrapper.open = True
        return element

    def _apply_trigger(
        self,
        session: EditSession,
        form: FormElement,
        form_state: FormState,
        list_source: ListSource,
    ) -> None:
        if session.trigger == SET_DEFAULT_FILTER:
            if not session.filter_key:
                return
            facet = self.get_facet_by_id(list_source, session.filter_key)
            if facet is None:
                logger.warning(
                    "Cannot set default value of unknown filter",
                    filter_key=session.filter_key,
                    search_id=list_source.get_search_id(),
                )
                return
            value = facet.widget.prepare_value_for_url(facet, form, form_state)
            if value:
                session.current_filters.set(session.filter_key, value)
            else:
                # Nothing selected unpins the filter
                session.current_filters.remove(session.filter_key)

        elif session.trigger == REMOVE_DEFAULT_FILTER:
            if session.filter_key:
                session.current_filters.remove(session.filter_key)

    def _build_summary(
        self,
        session: EditSession,
        list_source: ListSource,
        available_filters: dict[str, str],
        ajax_wrapper: str | None,
    ) -> FormElement:
        rows: list[list[str]] = []
        for filter_key, filter_value in session.current_filters.items():
            facet = self.get_facet_by_id(list_source, filter_key)
            if facet is None:
                logger.info(
                    "Skipping preset filter without facet",
                    filter_key=filter_key,
                    search_id=list_source.get_search_id(),
                )
                continue
            label = self._get_default_value_label(facet, list_source, filter_value)
            rows.append([available_filters.get(filter_key, facet.name), label])

        summary = FormElement(type="details", title="Default filter values", open=True)
        summary["table"] = FormElement(
            type="table",
            header=["Filter", "Value"],
            rows=rows,
            empty="No default values set.",
        )
        summary["add_new"] = FormElement(
            type="select",
            title="Set default value for:",
            name=ADD_NEW_FILTER,
            options={"": "- None -", **available_filters},
            default_value="",
            ajax=AjaxSettings(callback="edit_default_value", wrapper=ajax_wrapper or ""),
        )
        return summary

    def _get_default_value_label(
        self,
        facet: Facet,
        list_source: ListSource,
        filter_value: list[str],
    ) -> str:
        original_active_items = list(facet.active_items)
        facet.active_items = filter_value
        try:
            results = run_build_processors(facet, [])
        finally:
            facet.active_items = original_active_items

        display_values = {result.raw_value: result.display_value for result in results}
        labels = [display_values.get(value, value) for value in filter_value]
        return facet.widget.get_default_values_label(facet, list_source, labels)

    async def _build_edit(
        self,
        session: EditSession,
        list_source: ListSource,
        available_filters: dict[str, str],
        ajax_wrapper: str | None,
    ) -> FormElement:
        filter_key = session.selected_filter
        label = available_filters.get(filter_key, filter_key)
        edit = FormElement(type="fieldset", title=f"Set default value for {label}")

        # Only the facet counts are needed; they cover the whole filtered set
        result_set = await list_source.get_query(limit=FACET_REFRESH_LIMIT).execute()
        self.facets_manager.update_results(list_source.get_search_id(), result_set)

        facet = self.get_facet_by_id(list_source, filter_key)
        if facet is not None:
            current_value = session.current_filters.get(filter_key)
            if current_value:
                facet.active_items = current_value
            self.facets_manager.build(facet)

            element = facet.widget.build_default_values_widget(
                facet, list_source, [PRESET_FILTERS_WRAPPER, "edit", facet.id]
            )
            if element is not None:
                edit[facet.id] = element
        else:
            logger.warning(
                "Cannot edit default value of unknown filter",
                filter_key=filter_key,
                search_id=list_source.get_search_id(),
            )

        edit["filter_key"] = FormElement(type="value", value=filter_key)
        edit["set_value"] = FormElement(
            type="button",
            name=SET_DEFAULT_FILTER,
            value="Set default value",
            ajax=AjaxSettings(callback="set_default_values", wrapper=ajax_wrapper or ""),
        )
        edit["remove_value"] = FormElement(
            type="button",
            name=REMOVE_DEFAULT_FILTER,
            value="Remove default value",
            ajax=AjaxSettings(callback="set_default_values", wrapper=ajax_wrapper or ""),
        )
        return edit
