"""Pytest configuration for shared package tests."""

import pytest

from list_pages_shared.config import get_settings
from list_pages_shared.logging import clear_context, set_correlation_id


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so environment patches take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_log_context():
    """Reset the correlation ID and bound log context around each test."""
    set_correlation_id(None)
    clear_context()
    yield
    set_correlation_id(None)
    clear_context()
