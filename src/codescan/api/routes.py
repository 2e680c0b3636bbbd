"""Scan API routes."""

from __future__ import annotations

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from codescan.api.dependencies import Caller, Dependencies
from codescan.api.schema import (
    ErrorPayload,
    PublicCodePayload,
    ScanRecordPayload,
    ScanRequest,
    ScanResponse,
)
from codescan.domain.errors import CodeNotFoundError
from codescan.domain.scan_ingest import ingest_scan, list_scan_events, lookup_code

router = APIRouter(prefix="/api")

PUBLIC_CODE_CACHE_CONTROL = "public, max-age=3600"
NO_STORE = "no-store"


@router.post(
    "/scan-events",
    response_model=ScanResponse,
    responses={400: {"model": ErrorPayload}, 401: {"model": ErrorPayload}},
)
def create_scan_event(
    payload: ScanRequest,
    caller: Caller,
    deps: Dependencies,
    response: Response,
) -> ScanResponse:
    """Normalize the payload, resolve its code and record the scan."""

    result = ingest_scan(
        payload.raw_payload,
        caller,
        unit_of_work_factory=deps.unit_of_work_factory,
        defaults=deps.defaults,
        size=payload.size,
        system_acronym=payload.system_acronym,
        clock=deps.clock,
    )
    response.headers["Cache-Control"] = NO_STORE
    return ScanResponse.from_result(result)


@router.get("/scan-events", response_model=list[ScanRecordPayload])
def get_scan_events(
    caller: Caller,
    deps: Dependencies,
    response: Response,
) -> list[ScanRecordPayload]:
    """Return the caller's scans newest first, joined with their code."""

    records = list_scan_events(
        caller,
        unit_of_work_factory=deps.unit_of_work_factory,
        limit=deps.page_size,
    )
    response.headers["Cache-Control"] = NO_STORE
    return [ScanRecordPayload.from_record(record) for record in records]


@router.get(
    "/codes/{code_id}",
    response_model=PublicCodePayload,
    responses={404: {"model": ErrorPayload}},
)
def get_public_code(
    code_id: str,
    deps: Dependencies,
    response: Response,
) -> PublicCodePayload | JSONResponse:
    """Public lookup; no identity required."""

    try:
        code = lookup_code(code_id, unit_of_work_factory=deps.unit_of_work_factory)
    except CodeNotFoundError:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=ErrorPayload(error="Code not found").model_dump(
                by_alias=True, exclude_none=True
            ),
        )
    response.headers["Cache-Control"] = PUBLIC_CODE_CACHE_CONTROL
    return PublicCodePayload.from_code(code)
