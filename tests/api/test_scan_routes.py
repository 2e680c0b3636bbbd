from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.testclient import TestClient

from codescan.api import create_app
from codescan.config import CALLER_ID_HEADER, IngestConfig
from tests.helpers.scans import InMemoryScanStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from fastapi import Request

    from codescan.adapters.sqlalchemy.unit_of_work import SqlAlchemyScanUnitOfWork

ALICE = {CALLER_ID_HEADER: "alice"}
BOB = {CALLER_ID_HEADER: "bob"}


def test_post_scan_event_returns_code_and_event(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/scan-events",
        json={"rawPayload": "https://host/s/b7g4jx9m"},
        headers=ALICE,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == {
        "id": "B7G4JX9M",
        "systemAcronym": "TMGS",
        "size": "unspecified",
        "year": 2025,
    }
    assert set(body["scanEvent"]) == {"id", "scannedAt"}
    assert response.headers["cache-control"] == "no-store"


def test_post_scan_event_applies_overrides_on_first_sight(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/scan-events",
        json={"rawPayload": "C8H5KY0N", "size": "A4", "systemAcronym": "LAB"},
        headers=ALICE,
    )

    assert response.json()["code"]["size"] == "A4"
    assert response.json()["code"]["systemAcronym"] == "LAB"


def test_invalid_payload_returns_reason(api_client: TestClient) -> None:
    response = api_client.post("/api/scan-events", json={"rawPayload": "AB-12"}, headers=ALICE)

    assert response.status_code == 400
    assert response.json()["reason"] == "invalid_characters"
    assert "Invalid code ID" in response.json()["error"]


def test_missing_raw_payload_is_rejected(api_client: TestClient) -> None:
    response = api_client.post("/api/scan-events", json={"size": "A4"}, headers=ALICE)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing or invalid rawPayload"}


def test_missing_identity_is_unauthorized(api_client: TestClient) -> None:
    response = api_client.post("/api/scan-events", json={"rawPayload": "A6F3HW7L"})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert api_client.get("/api/scan-events").status_code == 401


def test_listing_is_scoped_and_newest_first(api_client: TestClient) -> None:
    for raw, headers in [("A6F3HW7L", ALICE), ("B7G4JX9M", BOB), ("a6f3hw7l", ALICE)]:
        api_client.post("/api/scan-events", json={"rawPayload": raw}, headers=headers)
    api_client.post("/api/scan-events", json={"rawPayload": "C8H5KY0N"}, headers=ALICE)

    response = api_client.get("/api/scan-events", headers=ALICE)

    assert response.status_code == 200
    body = response.json()
    assert [item["rawPayload"] for item in body] == ["C8H5KY0N", "a6f3hw7l", "A6F3HW7L"]
    assert body[0]["code"]["id"] == "C8H5KY0N"
    assert body[0]["scannedAt"] > body[1]["scannedAt"]
    assert response.headers["cache-control"] == "no-store"


def test_listing_caps_at_page_size(
    sqlite_unit_of_work: Callable[[], SqlAlchemyScanUnitOfWork],
) -> None:
    app = create_app(
        unit_of_work_factory=sqlite_unit_of_work,
        ingest_config=IngestConfig(page_size=2),
    )
    with TestClient(app) as client:
        for raw in ("A6F3HW7L", "B7G4JX9M", "C8H5KY0N"):
            client.post("/api/scan-events", json={"rawPayload": raw}, headers=ALICE)

        body = client.get("/api/scan-events", headers=ALICE).json()

    assert len(body) == 2


def test_public_code_lookup(api_client: TestClient) -> None:
    api_client.post("/api/scan-events", json={"rawPayload": "A6F3HW7L"}, headers=ALICE)

    response = api_client.get("/api/codes/a6f3hw7l")

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"id", "systemAcronym", "size", "year", "createdAt"}
    assert body["id"] == "A6F3HW7L"
    assert response.headers["cache-control"] == "public, max-age=3600"


def test_public_code_lookup_unknown(api_client: TestClient) -> None:
    response = api_client.get("/api/codes/ZZZZZZ")

    assert response.status_code == 404
    assert response.json() == {"error": "Code not found"}


def test_storage_failure_returns_generic_error() -> None:
    store = InMemoryScanStore(unavailable=True)
    app = create_app(unit_of_work_factory=store.unit_of_work, ingest_config=IngestConfig())

    with TestClient(app) as client:
        response = client.post(
            "/api/scan-events",
            json={"rawPayload": "A6F3HW7L"},
            headers=ALICE,
        )

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "store unavailable" not in response.text


def test_identity_resolver_can_be_replaced() -> None:
    store = InMemoryScanStore()

    def from_bearer(request: Request) -> str | None:
        header = request.headers.get("Authorization", "")
        return header.removeprefix("Bearer ") or None

    app = create_app(
        unit_of_work_factory=store.unit_of_work,
        ingest_config=IngestConfig(),
        identity_resolver=from_bearer,
    )
    with TestClient(app) as client:
        response = client.post(
            "/api/scan-events",
            json={"rawPayload": "A6F3HW7L"},
            headers={"Authorization": "Bearer carol"},
        )

    assert response.status_code == 200
    assert store.codes["A6F3HW7L"].owner_id == "carol"


def test_healthz(api_client: TestClient) -> None:
    assert api_client.get("/healthz").json() == {"status": "ok"}
