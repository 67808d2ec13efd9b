"""ListPage SQLAlchemy model."""

from typing import Any
from uuid import UUID

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, generate_uuid


class ListPage(Base, TimestampMixin):
    """A content item carrying a list configuration.

    The configuration names the listed collection (entity type and bundle)
    and the preset filters an editor pinned for it. Preset filters map a
    facet id to the list of raw values pinned for that facet.
    """

    __tablename__ = "ListPages"

    list_page_id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    source_entity_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    source_bundle: Mapped[str | None] = mapped_column(String(64), nullable=True)
    preset_filters: Mapped[dict[str, Any]] = mapped_column(default=dict, nullable=False)

    __table_args__ = (
        Index("ix_list_pages_source", "source_entity_type", "source_bundle"),
    )
