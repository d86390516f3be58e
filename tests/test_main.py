from __future__ import annotations

from fastapi.testclient import TestClient

from xsrf_guard.config import Settings
from xsrf_guard.main import create_app
from xsrf_guard.middleware.xsrf import XSRFOptions


def _client(**options) -> TestClient:
    settings = Settings(_env_file=None, session_secret_key="test-session-key")
    xsrf_options = XSRFOptions.from_settings(settings, **options) if options else None
    return TestClient(create_app(settings, xsrf_options))


def test_health() -> None:
    with _client() as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_token_round_trip_through_session_cookie() -> None:
    with _client() as client:
        first = client.get("/xsrf-token")
        token = first.json()["xsrfToken"]
        assert first.cookies.get("XSRF-TOKEN") == token
        assert first.cookies.get("session")

        client.get("/health")
        response = client.post("/echo", json={"value": 1}, headers={"X-XSRF-TOKEN": token})

    assert response.status_code == 200
    assert response.json() == {"value": 1}


def test_post_without_token_is_rejected() -> None:
    with _client() as client:
        client.get("/xsrf-token")
        response = client.post("/echo", json={"value": 1})

    assert response.status_code == 412


def test_token_from_another_session_is_rejected() -> None:
    with _client() as other:
        foreign = other.get("/xsrf-token").json()["xsrfToken"]

    with _client() as client:
        client.get("/xsrf-token")
        response = client.post("/echo", json={}, headers={"X-XSRF-TOKEN": foreign})

    assert response.status_code == 412


def test_ignore_hook_through_app_factory() -> None:
    with _client(ignore=lambda request: request.url.path == "/echo") as client:
        response = client.post("/echo", json={"value": 2})

    assert response.status_code == 200
    assert response.cookies.get("XSRF-TOKEN")
