from __future__ import annotations

import pytest

from codescan.domain.errors import InvalidPayloadError, RejectionReason, ValidationError
from codescan.domain.normalization import build_code_url, is_valid, normalize


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("A6F3HW7L", "A6F3HW7L"),
        ("a6f3hw7l", "A6F3HW7L"),
        ("  a6f3hw7l\n", "A6F3HW7L"),
        ("https://host/s/B7G4JX9M", "B7G4JX9M"),
        ("http://host/s/b7g4jx9m/", "B7G4JX9M"),
        ("https://host?code=c8h5ky0n", "C8H5KY0N"),
        ("https://host/s/IGNORED1?code=C8H5KY0N", "C8H5KY0N"),
        ("https://host/s/B7G4JX9M?code=", "B7G4JX9M"),
        ("HTTPS://HOST/S/B7G4JX9M", "B7G4JX9M"),
        ("https://host:8443/a/b/ZZ99ZZ", "ZZ99ZZ"),
        ("ABCDEF", "ABCDEF"),
        ("A" * 32, "A" * 32),
    ],
)
def test_normalize_accepts_supported_shapes(raw: str, expected: str) -> None:
    assert normalize(raw) == expected


@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        ("", RejectionReason.EMPTY),
        ("   \t ", RejectionReason.EMPTY),
        ("ABC12", RejectionReason.TOO_SHORT),
        ("A" * 33, RejectionReason.TOO_LONG),
        ("AB-12", RejectionReason.INVALID_CHARACTERS),
        ("A6F3 HW7L", RejectionReason.INVALID_CHARACTERS),
        ("ÄBCDEFG", RejectionReason.INVALID_CHARACTERS),
        ("https://host:notaport/s/B7G4JX9M", RejectionReason.UNPARSEABLE_URL),
        ("https:///s/B7G4JX9M", RejectionReason.UNPARSEABLE_URL),
        ("https://host/", RejectionReason.MISSING_URL_CODE),
        ("https://host", RejectionReason.MISSING_URL_CODE),
        ("https://host/s/AB-123", RejectionReason.INVALID_CHARACTERS),
    ],
)
def test_normalize_rejects_with_specific_reason(raw: str, reason: RejectionReason) -> None:
    with pytest.raises(InvalidPayloadError) as excinfo:
        normalize(raw)

    assert excinfo.value.reason is reason
    assert isinstance(excinfo.value, ValidationError)
    assert str(excinfo.value)


def test_normalize_is_idempotent() -> None:
    for raw in ("a6f3hw7l", "https://host/s/b7g4jx9m", "https://host?code=c8h5ky0n"):
        once = normalize(raw)
        assert normalize(once) == once


def test_is_valid_reports_without_raising() -> None:
    assert is_valid("a6f3hw7l")
    assert is_valid("https://host/s/B7G4JX9M")
    assert not is_valid("AB-12")
    assert not is_valid("")
    assert not is_valid("https://host/")


def test_build_code_url_round_trips() -> None:
    url = build_code_url("a6f3hw7l", "https://scan.example.org/")

    assert url == "https://scan.example.org/s/A6F3HW7L"
    assert normalize(url) == "A6F3HW7L"


def test_build_code_url_validates_first() -> None:
    with pytest.raises(InvalidPayloadError) as excinfo:
        build_code_url("AB-12")

    assert excinfo.value.reason is RejectionReason.INVALID_CHARACTERS
