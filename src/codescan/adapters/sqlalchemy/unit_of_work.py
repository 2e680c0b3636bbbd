"""SQLAlchemy units of work and the engine they share."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal, Self

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from codescan.adapters.sqlalchemy.errors import translate_storage_errors
from codescan.adapters.sqlalchemy.mappings import start_mappers
from codescan.adapters.sqlalchemy.migrations import upgrade_head
from codescan.adapters.sqlalchemy.repositories import (
    SqlAlchemyCodeRepository,
    SqlAlchemyScanEventRepository,
)
from codescan.config import DatabaseConfig, get_database_config
from codescan.domain.errors import StorageError
from codescan.domain.ports.unit_of_work import RepositoryCollection, ScanRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when storage is used before ``startup`` or configured twice."""


@dataclass(slots=True)
class _Storage:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None


_storage = _Storage()


def _sqlite_foreign_keys(dbapi_connection: object, _connection_record: object) -> None:
    cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Migrate the database to head and make it the target of new units of work.

    Without ``engine`` one is created from ``database_uri`` or the environment.
    """

    if _storage.engine is not None and not force:
        raise StartupError("Storage already started; pass force=True to replace the engine")

    if engine is None:
        database = (
            get_database_config() if database_uri is None else DatabaseConfig(uri=database_uri)
        )
        engine = create_engine(database.uri, echo=database.echo)
    if engine.dialect.name == "sqlite" and not event.contains(
        engine, "connect", _sqlite_foreign_keys
    ):
        event.listen(engine, "connect", _sqlite_foreign_keys)

    start_mappers()
    upgrade_head(engine=engine)

    _storage.engine = engine
    _storage.sessions = sessionmaker(bind=engine, expire_on_commit=False)
    log.info("Storage ready at %s", engine.url.render_as_string(hide_password=True))
    return engine


def configured_engine() -> Engine | None:
    return _storage.engine


def is_started() -> bool:
    return _storage.engine is not None


def shutdown() -> None:
    """Dispose the engine; later units of work fail until the next ``startup``."""

    if _storage.engine is not None:
        _storage.engine.dispose()
    _storage.engine = None
    _storage.sessions = None


def _session_factory() -> sessionmaker[Session]:
    if _storage.sessions is None:
        raise StartupError(
            "Storage not started. Call codescan.adapters.sqlalchemy.unit_of_work.startup() "
            "before opening a unit of work."
        )
    return _storage.sessions


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session per ``with`` block; uncommitted work is rolled back on error."""

    def __init__(self) -> None:
        self._sessions = _session_factory()
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _repositories_for(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> Self:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = self._repositories_for(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self._open_session()
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        session = self._open_session()
        try:
            with translate_storage_errors("commit"):
                session.commit()
        except StorageError:
            session.rollback()
            raise

    def rollback(self) -> None:
        self._open_session().rollback()

    def _open_session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session


class SqlAlchemyScanUnitOfWork(BaseSqlAlchemyUnitOfWork[ScanRepositories]):
    def _repositories_for(self, session: Session) -> ScanRepositories:
        return ScanRepositories(
            codes=SqlAlchemyCodeRepository(session),
            scan_events=SqlAlchemyScanEventRepository(session),
        )


if TYPE_CHECKING:
    from codescan.domain.ports.unit_of_work import ScanUnitOfWork

    _uow_check: ScanUnitOfWork = SqlAlchemyScanUnitOfWork()
