"""Application services for ingesting and reading scans."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from codescan.domain.clock import utc_now
from codescan.domain.errors import CodeNotFoundError, MissingIdentityError
from codescan.domain.model import ScanResult
from codescan.domain.normalization import normalize
from codescan.domain.recording import record_scan_event
from codescan.domain.resolution import resolve_code

DEFAULT_LIST_LIMIT = 50

if TYPE_CHECKING:
    from codescan.domain.clock import Clock
    from codescan.domain.model import Code, Identity, ScanRecord
    from codescan.domain.ports import UnitOfWorkFactory
    from codescan.domain.resolution import CodeDefaults

log = getLogger(__name__)


def ingest_scan(
    raw_payload: str,
    caller_id: Identity | None,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    defaults: CodeDefaults,
    size: str | None = None,
    system_acronym: str | None = None,
    clock: Clock = utc_now,
) -> ScanResult:
    """Normalize a raw payload, resolve its code and record the scan."""

    caller = require_identity(caller_id)
    code_id = normalize(raw_payload)
    code = resolve_code(
        code_id,
        caller,
        unit_of_work_factory=unit_of_work_factory,
        defaults=defaults.with_overrides(system_acronym=system_acronym, size=size),
        clock=clock,
    )
    event = record_scan_event(
        code.id,
        caller,
        raw_payload,
        unit_of_work_factory=unit_of_work_factory,
        clock=clock,
    )
    log.info("Ingested scan of code %s by %s", code.id, caller)
    return ScanResult(code=code, scan_event=event)


def list_scan_events(
    caller_id: Identity | None,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[ScanRecord]:
    """Return the caller's most recent scans, newest first."""

    caller = require_identity(caller_id)
    if limit <= 0:
        raise ValueError("limit must be positive")
    with unit_of_work_factory() as uow:
        return uow.repositories.scan_events.list_for_caller(caller, limit=limit)


def lookup_code(code_id: str, *, unit_of_work_factory: UnitOfWorkFactory) -> Code:
    """Public lookup by id; raises ``CodeNotFoundError`` when absent."""

    key = code_id.strip().upper()
    with unit_of_work_factory() as uow:
        code = uow.repositories.codes.get(key)
    if code is None:
        raise CodeNotFoundError(key)
    return code


def require_identity(caller_id: Identity | None) -> Identity:
    if caller_id is None or not caller_id.strip():
        raise MissingIdentityError("Unauthorized - missing caller identity")
    return caller_id.strip()
