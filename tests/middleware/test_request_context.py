"""Tests for the request context middleware.

Every response gets an X-Request-ID header, generated or echoed from the
request, including error responses from the scoring endpoints.
"""

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from tests.conftest import auth


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_unauthenticated_response(client: TestClient) -> None:
    resp = client.post("/v1/tests/submit", json={"island_id": str(uuid.uuid4())})
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None


def test_request_id_present_on_domain_error(client: TestClient, token: str) -> None:
    resp = client.post(
        "/v1/tests/submit",
        json={"island_id": str(uuid.uuid4())},
        headers={**auth(token), "X-Request-ID": "req-404"},
    )
    assert resp.status_code == 404
    assert resp.headers.get("x-request-id") == "req-404"
