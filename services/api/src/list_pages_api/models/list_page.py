"""Request and response models for list page endpoints."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from .base import BaseResponse, PagerMeta
from .form import FormElement
from .preset_filters import SessionMode, normalize_filter_value


def _normalize_filters(value: dict[str, Any] | None) -> dict[str, list[str]] | None:
    if value is None:
        return None
    return {key: normalize_filter_value(item) for key, item in value.items()}


class ListSourceInfo(BaseResponse):
    """A collection that list pages can list."""

    entity_type: str = Field(description="Entity type")
    bundle: str = Field(description="Bundle")
    label: str = Field(description="Human readable bundle name")
    search_id: str = Field(description="Facet source id")
    available_filters: dict[str, str] = Field(
        default_factory=dict, description="Facet id to label"
    )


class ListSourceListResponse(BaseResponse):
    """Available list sources."""

    sources: list[ListSourceInfo] = Field(description="List sources")


class ListPageCreateRequest(BaseModel):
    """Request to create a list page."""

    title: str = Field(min_length=1, max_length=255, description="List page title")
    source_entity_type: str | None = Field(default=None, max_length=64)
    source_bundle: str | None = Field(default=None, max_length=64)


class ListPageConfigRequest(BaseModel):
    """Request to update the list configuration of a list page.

    Omitting ``preset_filters`` keeps the committed presets unless the
    source changes, in which case they are cleared.
    """

    source_entity_type: str | None = Field(default=None, max_length=64)
    source_bundle: str | None = Field(default=None, max_length=64)
    preset_filters: dict[str, list[str]] | None = Field(
        default=None, description="Facet id to pinned raw values"
    )

    @field_validator("preset_filters", mode="before")
    @classmethod
    def normalize_preset_filters(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return _normalize_filters(value)
        return value


class ListPageResponse(BaseResponse):
    """A list page and its list configuration."""

    list_page_id: UUID = Field(description="List page ID")
    title: str = Field(description="List page title")
    source_entity_type: str | None = Field(default=None)
    source_bundle: str | None = Field(default=None)
    preset_filters: dict[str, list[str]] = Field(default_factory=dict)
    available_filters: dict[str, str] = Field(
        default_factory=dict, description="Filters of the configured source"
    )
    created_at: datetime | None = Field(default=None)
    updated_at: datetime | None = Field(default=None)


class PresetFiltersFormRequest(BaseModel):
    """One round trip of the preset filter form."""

    form_key: str = Field(default="list_page_config", min_length=1, description="Form container key")
    triggering_element: str | None = Field(
        default=None, description="Name of the element that triggered the round trip"
    )
    values: dict[str, Any] = Field(default_factory=dict, description="Submitted form values")


class PresetFiltersFormResponse(BaseResponse):
    """Rendered preset filter form."""

    form_key: str = Field(description="Form container key")
    mode: SessionMode | None = Field(default=None, description="Rendered view")
    current_filters: dict[str, list[str]] = Field(
        default_factory=dict, description="Uncommitted preset filters"
    )
    element: FormElement = Field(description="Element to render or replace")


class ContentCard(BaseResponse):
    """A listed content item."""

    entity_id: UUID = Field(description="Content ID")
    entity_type: str = Field(description="Entity type")
    bundle: str = Field(description="Bundle")
    title: str = Field(description="Title")
    created_at: datetime | None = Field(default=None)
    updated_at: datetime | None = Field(default=None)


class ListResultsResponse(BaseResponse):
    """Rendered list of a list page."""

    list_page_id: UUID = Field(description="List page ID")
    has_list: bool = Field(description="Whether the page has a usable list")
    items: list[ContentCard] = Field(default_factory=list)
    pager: PagerMeta | None = Field(default=None)
    sort: dict[str, str] = Field(default_factory=dict, description="Applied sort")
    applied_filters: dict[str, list[str]] = Field(
        default_factory=dict, description="Preset and active filters applied"
    )
