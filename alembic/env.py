"""Alembic environment configuration."""

from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy.engine import URL, make_url

from alembic import context

from src.config import load_config
from src.db.session import Database
from src.models import Base


config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

app_config = load_config()
config.set_main_option(
    "sqlalchemy.url", app_config.database_url.replace("%", "%%")
)

target_metadata = Base.metadata


def _should_render_batch(database_url: str | URL) -> bool:
    url = make_url(database_url)
    return url.get_backend_name() == "sqlite"


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""

    database_url = app_config.database_url
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_should_render_batch(database_url),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""

    database = Database(app_config)
    try:
        with database.engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                render_as_batch=_should_render_batch(app_config.database_url),
            )

            with context.begin_transaction():
                context.run_migrations()
    finally:
        database.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
