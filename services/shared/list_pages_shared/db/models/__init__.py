"""SQLAlchemy database models for list pages."""

from .base import Base, TimestampMixin, generate_uuid
from .content import BundleSettings, ContentEntity, ContentFieldValue
from .list_page import ListPage

__all__ = [
    "Base",
    "BundleSettings",
    "ContentEntity",
    "ContentFieldValue",
    "ListPage",
    "TimestampMixin",
    "generate_uuid",
]
