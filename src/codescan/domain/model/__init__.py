"""Public domain model surface."""

from __future__ import annotations

from codescan.domain.model.code import (
    Code,
    CodeSummary,
    ScanEvent,
    ScanRecord,
    ScanResult,
    new_id,
)
from codescan.domain.model.primitives import CodeId, Identity

__all__ = [
    "Code",
    "CodeId",
    "CodeSummary",
    "Identity",
    "ScanEvent",
    "ScanRecord",
    "ScanResult",
    "new_id",
]
