from __future__ import annotations

from fastapi.testclient import TestClient

from src.protocol.http.app import create_app


def test_healthz_ok() -> None:
    client = TestClient(create_app())
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_each_request_gets_its_own_request_id() -> None:
    client = TestClient(create_app())
    first = client.get("/healthz").headers["x-request-id"]
    second = client.get("/healthz").headers["x-request-id"]
    assert first and second
    assert first != second


def test_failed_game_route_still_carries_request_id() -> None:
    client = TestClient(create_app())
    r = client.get("/api/games/missing/state")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"
    assert r.headers["x-request-id"]
