"""Port for talking to the scan API from a client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from codescan.domain.model import ScanRecord


@runtime_checkable
class ScanApi(Protocol):
    """Remote scan ingestion as seen by a client.

    Implementations raise ``ScanPipelineError`` subclasses on failure.
    """

    def submit_scan(self, raw_payload: str) -> ScanRecord: ...

    def list_scans(self) -> list[ScanRecord]: ...
