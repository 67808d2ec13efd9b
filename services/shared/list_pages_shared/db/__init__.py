"""Shared database module."""

from .connection import (
    DatabaseConnection,
    create_engine,
    create_session_factory,
    get_database_url,
    get_db,
    get_session,
)
from .models import (
    Base,
    BundleSettings,
    ContentEntity,
    ContentFieldValue,
    ListPage,
    TimestampMixin,
    generate_uuid,
)

__all__ = [
    "Base",
    "BundleSettings",
    "ContentEntity",
    "ContentFieldValue",
    "DatabaseConnection",
    "ListPage",
    "TimestampMixin",
    "create_engine",
    "create_session_factory",
    "generate_uuid",
    "get_database_url",
    "get_db",
    "get_session",
]
