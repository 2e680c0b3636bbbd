"""Public interface for the scan API client adapter."""

from __future__ import annotations

from .client import HttpScanApi, ScanApiError
from .translator import record_from_payload, record_from_scan_response

__all__ = [
    "HttpScanApi",
    "ScanApiError",
    "record_from_payload",
    "record_from_scan_response",
]
