"""Alembic environment configuration for the list pages service."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from list_pages_shared.config import get_settings
from list_pages_shared.db.models import Base

# Alembic Config object
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Model metadata for autogenerate
target_metadata = Base.metadata


def get_url() -> str:
    """Get a synchronous database URL from settings."""
    url = get_settings().database.url
    if not url:
        raise ValueError("DATABASE_URL environment variable is required")
    # Handle pyodbc connection string format
    if "://" not in url:
        return f"mssql+pyodbc://{url}?driver=ODBC+Driver+18+for+SQL+Server&TrustServerCertificate=yes"
    # Alembic runs on the sync driver
    return url.replace("mssql+aioodbc://", "mssql+pyodbc://")


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL to the script output."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = create_engine(get_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
