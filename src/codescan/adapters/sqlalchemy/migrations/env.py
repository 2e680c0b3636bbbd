"""Alembic entry point; run by ``alembic.command`` functions, never imported."""

from __future__ import annotations

from typing import Any

from alembic import context
from sqlalchemy import create_engine, pool

from codescan.adapters.sqlalchemy import mapper_registry, start_mappers
from codescan.config import get_database_config

config = context.config

start_mappers()
target_metadata = mapper_registry.metadata


def _migrate(**options: Any) -> None:  # noqa: ANN401
    # batch mode lets ALTERs work on SQLite
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=True,
        compare_type=True,
        **options,
    )
    with context.begin_transaction():
        context.run_migrations()


def _url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


if context.is_offline_mode():
    _migrate(url=_url(), literal_binds=True)
elif (shared := config.attributes.get("connection")) is not None:
    _migrate(connection=shared)
else:
    engine = create_engine(_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            _migrate(connection=connection)
    finally:
        engine.dispose()
