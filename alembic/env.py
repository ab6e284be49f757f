"""Alembic environment for the appeal engine schema."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from appeal_engine.adapters.persistence.database import Base
from appeal_engine.adapters.persistence.models import (  # noqa: F401 (registers tables)
    AdminCategoryExpertiseModel,
    AdminWorkloadModel,
)
from appeal_engine.config import settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Migrations run on the sync driver; the app itself uses asyncpg
SYNC_DATABASE_URL = settings.database_url.replace("+asyncpg", "+psycopg2")


def run_migrations_offline() -> None:
    """Emit SQL without connecting."""
    context.configure(
        url=SYNC_DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = SYNC_DATABASE_URL

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
