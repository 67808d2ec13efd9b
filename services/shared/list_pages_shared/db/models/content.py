"""Listable content and bundle settings SQLAlchemy models."""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, generate_uuid


class ContentEntity(Base, TimestampMixin):
    """A piece of content that list pages can list."""

    __tablename__ = "ContentEntities"

    entity_id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    bundle: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    field_values: Mapped[list["ContentFieldValue"]] = relationship(
        "ContentFieldValue",
        back_populates="entity",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_content_entities_bundle", "entity_type", "bundle"),
        Index("ix_content_entities_created", "created_at"),
    )


class ContentFieldValue(Base):
    """A single (field, value) pair of a content entity.

    Facets filter and count over these rows, one row per value of a
    multi-valued field.
    """

    __tablename__ = "ContentFieldValues"

    value_id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    entity_id: Mapped[UUID] = mapped_column(
        ForeignKey("ContentEntities.entity_id", ondelete="CASCADE"),
        nullable=False,
    )
    field_name: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[str] = mapped_column(String(255), nullable=False)

    entity: Mapped["ContentEntity"] = relationship(
        "ContentEntity",
        back_populates="field_values",
    )

    __table_args__ = (
        Index("ix_content_field_values_entity", "entity_id"),
        Index("ix_content_field_values_field", "field_name", "value"),
    )


class BundleSettings(Base, TimestampMixin):
    """Per-bundle list settings: availability and default sort."""

    __tablename__ = "BundleSettings"

    bundle_settings_id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    bundle: Mapped[str] = mapped_column(String(64), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    list_pages_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    default_sort_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    default_sort_direction: Mapped[str | None] = mapped_column(String(4), nullable=True)

    __table_args__ = (
        UniqueConstraint("entity_type", "bundle", name="UQ_BundleSettings"),
    )
