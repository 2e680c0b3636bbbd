"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from codescan.adapters.scan_api import HttpScanApi
from codescan.api import create_app
from codescan.domain.normalization import build_code_url, normalize
from codescan.domain.reconciliation import DEFAULT_DEBOUNCE_SECONDS, ScanHistory

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fastapi import FastAPI

    from codescan.api.schema import PublicCodePayload
    from codescan.domain.model import ScanRecord
    from codescan.domain.ports import ScanApi, UnitOfWorkFactory

log = getLogger(__name__)


def build_api_app(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> FastAPI:
    """Build the scan API backed by the configured database."""

    return create_app(unit_of_work_factory=unit_of_work_factory)


def build_scan_history(
    *,
    api: ScanApi | None = None,
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
) -> ScanHistory:
    return ScanHistory(api or HttpScanApi(), debounce_seconds=debounce_seconds)


def submit_scans(
    raw_payloads: Iterable[str],
    *,
    history: ScanHistory | None = None,
) -> list[ScanRecord]:
    """Submit payloads in order, skipping repeats caught by the debounce window.

    Returns the records accepted by the server.
    """

    effective_history = history or build_scan_history()
    accepted: list[ScanRecord] = []
    for raw_payload in raw_payloads:
        record = effective_history.record_scan(raw_payload)
        if record is None:
            log.info("Skipped repeated scan %r", raw_payload)
            continue
        log.info("Recorded scan of %s at %s", record.code_id, record.scanned_at.isoformat())
        accepted.append(record)
    return accepted


def fetch_scan_history(*, api: ScanApi | None = None) -> tuple[ScanRecord, ...]:
    history = build_scan_history(api=api)
    history.refresh()
    return history.scans


def lookup_public_code(code_id: str, *, api: HttpScanApi | None = None) -> PublicCodePayload:
    return (api or HttpScanApi()).lookup_code(code_id)


def describe_payload(raw_payload: str, *, base_url: str | None = None) -> tuple[str, str]:
    """Return the canonical id carried by a payload and its printable URL."""

    code_id = normalize(raw_payload)
    if base_url is None:
        return code_id, build_code_url(code_id)
    return code_id, build_code_url(code_id, base_url)
