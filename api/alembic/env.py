"""
Alembic environment for the Wordcraft schema.

The URL comes from app settings rather than alembic.ini, so migrations run
against the same database as the API. SQLite needs batch mode for ALTER.
"""
from alembic import context
from sqlmodel import SQLModel

import app.models  # noqa: F401  registers every table on SQLModel.metadata
from app.core.config import settings
from app.core.database import engine, normalize_database_url

config = context.config
database_url = normalize_database_url(settings.database_url)
config.set_main_option("sqlalchemy.url", database_url)

target_metadata = SQLModel.metadata


def _configure_options(is_sqlite: bool) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": is_sqlite,
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    context.configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(database_url.startswith("sqlite")),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            **_configure_options(connection.dialect.name == "sqlite"),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
