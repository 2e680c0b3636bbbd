"""Locations of codescan's local files and the database it talks to."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

DATA_DIR_ENV: Final[str] = "CODESCAN_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
SQL_ECHO_ENV: Final[str] = "CODESCAN_SQL_ECHO"

DEFAULT_DB_FILENAME: Final[str] = "codescan.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


def _platform_data_home() -> Path:
    if sys.platform == "win32":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Directory holding the default SQLite database and the HTTP response cache.

    Paths are resolved lazily and the directory is created on first use.
    """

    data_dir: Path

    def file(self, filename: str) -> Path:
        directory = self.data_dir.expanduser().resolve()
        directory.mkdir(parents=True, exist_ok=True)
        return directory / filename

    @property
    def database_path(self) -> Path:
        return self.file(DEFAULT_DB_FILENAME)

    @property
    def http_cache_path(self) -> Path:
        return self.file(HTTP_CACHE_FILENAME)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def get_storage_config() -> StorageConfig:
    override = os.getenv(DATA_DIR_ENV)
    if override:
        return StorageConfig(data_dir=Path(override))
    return StorageConfig(data_dir=_platform_data_home() / "codescan")


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Use ``DATABASE_URI`` when set, else a SQLite file in the data directory."""

    echo = optional_env_var(SQL_ECHO_ENV, "0").lower() in {"1", "true", "yes"}
    uri = os.getenv(DATABASE_URI_ENV)
    if not uri:
        database_path = (storage or get_storage_config()).database_path
        uri = f"sqlite+pysqlite:///{database_path}"
    return DatabaseConfig(uri=uri, echo=echo)
