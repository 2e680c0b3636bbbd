"""Ports for persisting codes and scan events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from codescan.domain.model import Code, ScanEvent

if TYPE_CHECKING:
    from datetime import datetime

    from codescan.domain.model import CodeId, Identity, ScanRecord


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class CodeRepository(Repository[Code], Protocol):
    """Persistence contract for codes, keyed by their canonical id."""

    def get(self, code_id: CodeId) -> Code | None: ...


@runtime_checkable
class ScanEventRepository(Repository[ScanEvent], Protocol):
    """Persistence contract for the append-only scan history."""

    def latest_scanned_at(self, scanned_by_id: Identity) -> datetime | None: ...

    def next_sequence(self, scanned_by_id: Identity) -> int: ...

    def list_for_caller(self, scanned_by_id: Identity, *, limit: int) -> list[ScanRecord]: ...
