"""Alembic migrations bundled with the SQLAlchemy adapter."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from codescan.config import get_database_config

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent


def alembic_config(database_uri: str | None = None) -> Config:
    """Return a file-less Alembic config pointing at the bundled scripts."""

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri is not None:
        # Config values go through configparser interpolation
        config.set_main_option("sqlalchemy.url", database_uri.replace("%", "%%"))
    return config


def _run(
    action: Callable[[Config], None],
    *,
    engine: Engine | None,
    database_uri: str | None,
) -> None:
    if engine is None:
        action(alembic_config(database_uri or get_database_config().uri))
        return
    config = alembic_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        action(config)


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema up to the latest revision."""

    _run(lambda config: command.upgrade(config, "head"), engine=engine, database_uri=database_uri)


def downgrade_base(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Drop everything the migrations created."""

    _run(lambda config: command.downgrade(config, "base"), engine=engine, database_uri=database_uri)
