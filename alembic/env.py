"""Alembic environment: schema for users and posts, database URL taken from app settings."""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

os.environ.setdefault("APP_ENV", "dev")
from app.core.config import settings
from app.models import Base, Post, User  # noqa: F401

config = context.config
_LOGGING_SECTIONS = ("formatters", "handlers", "loggers")

# Logging is configured from alembic.ini only when it carries all logging sections.
if config.config_file_name is not None and all(
    config.file_config.has_section(section) for section in _LOGGING_SECTIONS
):
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """Database URL comes from application settings, never from alembic.ini."""
    return settings.DATABASE_URL


def _is_sqlite(url: str) -> bool:
    # SQLite cannot ALTER most constraints in place; batch mode recreates tables.
    return url.startswith("sqlite://")


def run_migrations_offline() -> None:
    """Emit SQL for the users/posts schema without connecting."""
    url = get_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_is_sqlite(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Connect and apply pending revisions."""
    url = get_url()
    connectable = create_engine(url, poolclass=NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=_is_sqlite(url),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
