"""Translate scan API payloads into domain read models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codescan.domain.model import CodeSummary, ScanRecord

if TYPE_CHECKING:
    from codescan.api.schema import CodePayload, ScanRecordPayload, ScanResponse


def _summary(payload: CodePayload) -> CodeSummary:
    return CodeSummary(
        id=payload.id,
        system_acronym=payload.system_acronym,
        size=payload.size,
        year=payload.year,
    )


def record_from_scan_response(raw_payload: str, response: ScanResponse) -> ScanRecord:
    """Build the optimistic list entry for a freshly submitted scan."""

    return ScanRecord(
        id=response.scan_event.id,
        code_id=response.code.id,
        scanned_at=response.scan_event.scanned_at,
        raw_payload=raw_payload,
        code=_summary(response.code),
    )


def record_from_payload(payload: ScanRecordPayload) -> ScanRecord:
    return ScanRecord(
        id=payload.id,
        code_id=payload.code_id,
        scanned_at=payload.scanned_at,
        raw_payload=payload.raw_payload,
        code=_summary(payload.code) if payload.code is not None else None,
    )
