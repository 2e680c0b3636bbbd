from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from codescan.adapters.sqlalchemy.unit_of_work import SqlAlchemyScanUnitOfWork, shutdown, startup
from codescan.api import create_app
from codescan.config import IngestConfig
from tests.helpers.scans import InMemoryScanStore, SteppingClock

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection so the in-memory database survives across threads
    engine = create_engine(
        "sqlite+pysqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyScanUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyScanUnitOfWork:
        return SqlAlchemyScanUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def memory_store() -> InMemoryScanStore:
    return InMemoryScanStore()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def api_client(
    sqlite_unit_of_work: Callable[[], SqlAlchemyScanUnitOfWork],
    clock: SteppingClock,
) -> Iterator[TestClient]:
    app = create_app(
        unit_of_work_factory=sqlite_unit_of_work,
        ingest_config=IngestConfig(),
        clock=clock,
    )
    with TestClient(app) as client:
        yield client
