"""Pydantic models describing the scan API payloads."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from codescan.domain.model import Code, CodeSummary, ScanRecord, ScanResult


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ScanRequest(WireModel):
    raw_payload: str
    size: str | None = None
    system_acronym: str | None = None


class CodePayload(WireModel):
    id: str
    system_acronym: str
    size: str
    year: int

    @classmethod
    def from_summary(cls, summary: CodeSummary) -> CodePayload:
        return cls(
            id=summary.id,
            system_acronym=summary.system_acronym,
            size=summary.size,
            year=summary.year,
        )


class ScanEventPayload(WireModel):
    id: UUID
    scanned_at: datetime


class ScanResponse(WireModel):
    code: CodePayload
    scan_event: ScanEventPayload

    @classmethod
    def from_result(cls, result: ScanResult) -> ScanResponse:
        return cls(
            code=CodePayload.from_summary(result.code.summary()),
            scan_event=ScanEventPayload(
                id=result.scan_event.id,
                scanned_at=result.scan_event.scanned_at,
            ),
        )


class ScanRecordPayload(WireModel):
    id: UUID
    code_id: str
    scanned_at: datetime
    raw_payload: str
    code: CodePayload | None = None

    @classmethod
    def from_record(cls, record: ScanRecord) -> ScanRecordPayload:
        return cls(
            id=record.id,
            code_id=record.code_id,
            scanned_at=record.scanned_at,
            raw_payload=record.raw_payload,
            code=CodePayload.from_summary(record.code) if record.code is not None else None,
        )


class PublicCodePayload(WireModel):
    """Non-sensitive code fields; never exposes the owner."""

    id: str
    system_acronym: str
    size: str
    year: int
    created_at: datetime

    @classmethod
    def from_code(cls, code: Code) -> PublicCodePayload:
        return cls(
            id=code.id,
            system_acronym=code.system_acronym,
            size=code.size,
            year=code.year,
            created_at=code.created_at,
        )


class ErrorPayload(WireModel):
    error: str
    reason: str | None = None
