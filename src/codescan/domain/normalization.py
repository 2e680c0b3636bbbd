"""Payload normalization: raw scanned text to canonical code ids.

A payload can carry the code id in three shapes:

1. the bare id: ``A6F3HW7L``
2. a URL whose last path segment is the id: ``https://app.example.com/s/A6F3HW7L``
3. a URL with a ``code`` query parameter: ``https://app.example.com?code=A6F3HW7L``

Printed codes only ever carry the id; everything else about a code lives in the store.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final
from urllib.parse import parse_qs, urlsplit

from codescan.domain.errors import InvalidPayloadError, RejectionReason

if TYPE_CHECKING:
    from codescan.domain.model import CodeId

CODE_ID_MIN_LENGTH: Final[int] = 6
CODE_ID_MAX_LENGTH: Final[int] = 32
CODE_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Z0-9]+$")
CODE_QUERY_PARAMETER: Final[str] = "code"
DEFAULT_CODE_BASE_URL: Final[str] = "https://app.example.com"

_URL_PREFIXES: Final[tuple[str, ...]] = ("http://", "https://")


def normalize(raw: str) -> CodeId:
    """Return the canonical code id carried by ``raw``.

    Raises ``InvalidPayloadError`` with a specific reason when the payload is
    empty, is an unusable URL, or yields a candidate outside the id policy.
    """

    trimmed = raw.strip()
    if not trimmed:
        raise InvalidPayloadError(RejectionReason.EMPTY, "Invalid payload: empty after trimming")

    if trimmed.lower().startswith(_URL_PREFIXES):
        candidate = _candidate_from_url(trimmed)
    else:
        candidate = trimmed

    return _validate(candidate.upper())


def is_valid(candidate: str) -> bool:
    """Report whether ``candidate`` normalizes to a code id, without raising."""

    try:
        normalize(candidate)
    except InvalidPayloadError:
        return False
    return True


def build_code_url(code_id: str, base_url: str = DEFAULT_CODE_BASE_URL) -> str:
    """Return the printable URL form of ``code_id`` (validated first)."""

    validated = normalize(code_id)
    return f"{base_url.rstrip('/')}/s/{validated}"


def _candidate_from_url(value: str) -> str:
    try:
        parts = urlsplit(value)
        _ = parts.port  # raises on a malformed port
    except ValueError as exc:
        raise InvalidPayloadError(
            RejectionReason.UNPARSEABLE_URL,
            f"Invalid URL: unable to parse URL - {exc}",
        ) from exc
    if not parts.hostname:
        raise InvalidPayloadError(
            RejectionReason.UNPARSEABLE_URL,
            "Invalid URL: unable to parse URL - missing host",
        )

    query_values = parse_qs(parts.query, keep_blank_values=True).get(CODE_QUERY_PARAMETER, [])
    if query_values and query_values[0].strip():
        return query_values[0].strip()

    segments = [segment for segment in parts.path.split("/") if segment]
    if not segments:
        raise InvalidPayloadError(
            RejectionReason.MISSING_URL_CODE,
            "Invalid URL: no path segments or code query parameter found",
        )
    return segments[-1].strip()


def _validate(candidate: str) -> CodeId:
    # character check first so "AB-12" reports the dash rather than its length
    if not CODE_ID_PATTERN.fullmatch(candidate):
        raise InvalidPayloadError(
            RejectionReason.INVALID_CHARACTERS,
            "Invalid code ID: must contain only uppercase letters (A-Z) and numbers (0-9)",
        )
    if len(candidate) < CODE_ID_MIN_LENGTH:
        raise InvalidPayloadError(
            RejectionReason.TOO_SHORT,
            f"Invalid code ID: too short (minimum {CODE_ID_MIN_LENGTH} characters)",
        )
    if len(candidate) > CODE_ID_MAX_LENGTH:
        raise InvalidPayloadError(
            RejectionReason.TOO_LONG,
            f"Invalid code ID: too long (maximum {CODE_ID_MAX_LENGTH} characters)",
        )
    return candidate
