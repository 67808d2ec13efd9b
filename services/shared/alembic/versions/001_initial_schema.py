"""Initial schema - list pages, content and bundle settings.

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.mssql import NVARCHAR, UNIQUEIDENTIFIER

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("SYSUTCDATETIME()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("SYSUTCDATETIME()"),
        ),
    ]


def upgrade() -> None:
    """Create ListPages, ContentEntities, ContentFieldValues and BundleSettings."""
    op.create_table(
        "ListPages",
        sa.Column(
            "list_page_id",
            UNIQUEIDENTIFIER(),
            primary_key=True,
            server_default=sa.text("NEWSEQUENTIALID()"),
        ),
        sa.Column("title", NVARCHAR(255), nullable=False),
        sa.Column("source_entity_type", NVARCHAR(64), nullable=True),
        sa.Column("source_bundle", NVARCHAR(64), nullable=True),
        sa.Column("preset_filters", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_list_pages_source",
        "ListPages",
        ["source_entity_type", "source_bundle"],
    )

    op.create_table(
        "ContentEntities",
        sa.Column(
            "entity_id",
            UNIQUEIDENTIFIER(),
            primary_key=True,
            server_default=sa.text("NEWSEQUENTIALID()"),
        ),
        sa.Column("entity_type", NVARCHAR(64), nullable=False),
        sa.Column("bundle", NVARCHAR(64), nullable=False),
        sa.Column("title", NVARCHAR(500), nullable=False),
        sa.Column("status", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
    )
    op.create_index("ix_content_entities_bundle", "ContentEntities", ["entity_type", "bundle"])
    op.create_index("ix_content_entities_created", "ContentEntities", ["created_at"])

    op.create_table(
        "ContentFieldValues",
        sa.Column(
            "value_id",
            UNIQUEIDENTIFIER(),
            primary_key=True,
            server_default=sa.text("NEWSEQUENTIALID()"),
        ),
        sa.Column(
            "entity_id",
            UNIQUEIDENTIFIER(),
            sa.ForeignKey("ContentEntities.entity_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("field_name", NVARCHAR(64), nullable=False),
        sa.Column("value", NVARCHAR(255), nullable=False),
    )
    op.create_index("ix_content_field_values_entity", "ContentFieldValues", ["entity_id"])
    op.create_index(
        "ix_content_field_values_field",
        "ContentFieldValues",
        ["field_name", "value"],
    )

    op.create_table(
        "BundleSettings",
        sa.Column(
            "bundle_settings_id",
            UNIQUEIDENTIFIER(),
            primary_key=True,
            server_default=sa.text("NEWSEQUENTIALID()"),
        ),
        sa.Column("entity_type", NVARCHAR(64), nullable=False),
        sa.Column("bundle", NVARCHAR(64), nullable=False),
        sa.Column("label", NVARCHAR(255), nullable=False),
        sa.Column("list_pages_enabled", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("default_sort_name", NVARCHAR(64), nullable=True),
        sa.Column("default_sort_direction", NVARCHAR(4), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("entity_type", "bundle", name="UQ_BundleSettings"),
    )


def downgrade() -> None:
    """Drop all list pages tables."""
    op.drop_table("BundleSettings")
    op.drop_index("ix_content_field_values_field", table_name="ContentFieldValues")
    op.drop_index("ix_content_field_values_entity", table_name="ContentFieldValues")
    op.drop_table("ContentFieldValues")
    op.drop_index("ix_content_entities_created", table_name="ContentEntities")
    op.drop_index("ix_content_entities_bundle", table_name="ContentEntities")
    op.drop_table("ContentEntities")
    op.drop_index("ix_list_pages_source", table_name="ListPages")
    op.drop_table("ListPages")
