"""Error taxonomy for the scan ingestion pipeline."""

from __future__ import annotations

from enum import StrEnum


class ScanPipelineError(RuntimeError):
    """Base class for failures raised by the scan pipeline."""


class ValidationError(ScanPipelineError):
    """Client-caused failure; never retried automatically."""


class RejectionReason(StrEnum):
    EMPTY = "empty"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    INVALID_CHARACTERS = "invalid_characters"
    UNPARSEABLE_URL = "unparseable_url"
    MISSING_URL_CODE = "missing_url_code"


class InvalidPayloadError(ValidationError):
    """Raised when a raw payload cannot be turned into a canonical code id."""

    def __init__(self, reason: RejectionReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class AuthError(ScanPipelineError):
    """Raised when the caller identity is missing or unusable."""


class MissingIdentityError(AuthError):
    """Raised when a request carries no caller identity."""


class StorageError(ScanPipelineError):
    """Raised when the backing store is unavailable or rejects a write."""


class CodeConflictError(StorageError):
    """Raised when an insert loses against a concurrently created code row."""

    def __init__(self, message: str, *, code_id: str | None = None) -> None:
        super().__init__(message)
        self.code_id = code_id


class CodeNotFoundError(ScanPipelineError):
    """Raised when a code id does not reference an existing code."""

    def __init__(self, code_id: str) -> None:
        super().__init__(f"Code not found: {code_id}")
        self.code_id = code_id
