"""Exceptions raised by the list pages services."""


class ListPagesError(Exception):
    """Base class for list pages errors."""


class ConfigurationError(ListPagesError):
    """Broken facet, widget or processor wiring.

    These are developer-facing integrity problems and are never retried or
    swallowed.
    """


class InvalidProcessorError(ConfigurationError):
    """A processor claims a stage without implementing its capability."""


class UnknownProcessorError(ConfigurationError):
    """A facet definition references a processor type that does not exist."""


class UnknownWidgetError(ConfigurationError):
    """A facet definition references a widget type that does not exist."""


class InvalidFilterError(ListPagesError):
    """A submitted filter cannot be applied to a list."""


class UnknownFilterError(InvalidFilterError):
    """A filter key is not a facet of the list source."""

    def __init__(self, filter_key: str, search_id: str):
        super().__init__(f"Filter '{filter_key}' is not available on {search_id}")
        self.filter_key = filter_key
        self.search_id = search_id


class InvalidFilterValueError(InvalidFilterError):
    """A submitted filter value has the wrong shape or format."""
