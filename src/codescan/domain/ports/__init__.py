"""Domain port definitions for adapters."""

from __future__ import annotations

from collections.abc import Callable

from .persistence import CodeRepository, Repository, ScanEventRepository
from .scan_api import ScanApi
from .unit_of_work import RepositoryCollection, ScanRepositories, ScanUnitOfWork, UnitOfWork

type UnitOfWorkFactory = Callable[[], ScanUnitOfWork]

__all__ = [
    "CodeRepository",
    "Repository",
    "RepositoryCollection",
    "ScanApi",
    "ScanEventRepository",
    "ScanRepositories",
    "ScanUnitOfWork",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
