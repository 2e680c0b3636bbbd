"""Codes and the scan events that reference them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from datetime import datetime

    from codescan.domain.model.primitives import CodeId, Identity


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Code:
    """A reusable identifier scanned from a printed artifact.

    Rows are written once, on first resolution of an unseen id, and never
    updated afterwards: re-scans reuse the row as-is.
    """

    id: CodeId
    system_acronym: str
    size: str
    year: int
    owner_id: Identity
    created_at: datetime

    def summary(self) -> CodeSummary:
        return CodeSummary(
            id=self.id,
            system_acronym=self.system_acronym,
            size=self.size,
            year=self.year,
        )


@dataclass(eq=False, kw_only=True)
class ScanEvent:
    """One immutable occurrence of a code being scanned.

    ``sequence`` counts the scanner's events from 1 and orders events that
    share a ``scanned_at``.
    """

    id: UUID = field(default_factory=new_id)
    code_id: CodeId
    scanned_by_id: Identity
    scanned_at: datetime
    raw_payload: str
    sequence: int = 0


@dataclass(frozen=True, slots=True)
class CodeSummary:
    """Public, non-owner fields of a code."""

    id: CodeId
    system_acronym: str
    size: str
    year: int


@dataclass(frozen=True, slots=True)
class ScanRecord:
    """Read model: a scan event joined with its code's public fields."""

    id: UUID
    code_id: CodeId
    scanned_at: datetime
    raw_payload: str
    code: CodeSummary | None = None


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Outcome of ingesting one scan."""

    code: Code
    scan_event: ScanEvent

    def as_record(self) -> ScanRecord:
        return ScanRecord(
            id=self.scan_event.id,
            code_id=self.scan_event.code_id,
            scanned_at=self.scan_event.scanned_at,
            raw_payload=self.scan_event.raw_payload,
            code=self.code.summary(),
        )
