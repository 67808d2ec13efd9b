"""API request and response models."""

from .base import BaseResponse, ErrorDetail, ErrorResponse, PagerMeta
from .form import AjaxSettings, FormElement, FormState
from .list_page import (
    ContentCard,
    ListPageConfigRequest,
    ListPageCreateRequest,
    ListPageResponse,
    ListResultsResponse,
    ListSourceInfo,
    ListSourceListResponse,
    PresetFiltersFormRequest,
    PresetFiltersFormResponse,
)
from .preset_filters import (
    ADD_NEW_FILTER,
    FORM_KEY_MARKER,
    PRESET_FILTERS_WRAPPER,
    REMOVE_DEFAULT_FILTER,
    SET_DEFAULT_FILTER,
    EditSession,
    PresetFilterSet,
    SessionMode,
    normalize_filter_value,
)

__all__ = [
    "ADD_NEW_FILTER",
    "AjaxSettings",
    "BaseResponse",
    "ContentCard",
    "EditSession",
    "ErrorDetail",
    "ErrorResponse",
    "FORM_KEY_MARKER",
    "FormElement",
    "FormState",
    "ListPageConfigRequest",
    "ListPageCreateRequest",
    "ListPageResponse",
    "ListResultsResponse",
    "ListSourceInfo",
    "ListSourceListResponse",
    "PRESET_FILTERS_WRAPPER",
    "PagerMeta",
    "PresetFilterSet",
    "PresetFiltersFormRequest",
    "PresetFiltersFormResponse",
    "REMOVE_DEFAULT_FILTER",
    "SET_DEFAULT_FILTER",
    "SessionMode",
    "normalize_filter_value",
]
