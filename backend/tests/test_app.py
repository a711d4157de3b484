"""
Tests for the app itself: root info, health check and CORS.
"""

import pytest
from fastapi.testclient import TestClient

import weather_api.main as main


def test_root_lists_endpoints(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Weather Data API"
    assert "readings" in body["endpoints"]
    assert "accounts" in body["endpoints"]


@pytest.mark.parametrize("reachable, status", [(True, "healthy"), (False, "degraded")])
def test_health(database, monkeypatch, reachable, status):
    monkeypatch.setattr(main, "ping", lambda db: reachable)
    client = TestClient(main.create_app(database))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == status
    assert response.json()["database_reachable"] is reachable


def test_cors_preflight_allows_api_key_header(client):
    response = client.options(
        "/api/DataPoint/range",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "apiKey",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_cors_unknown_origin_not_echoed(client):
    response = client.get("/", headers={"Origin": "https://evil.example.com"})

    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


def test_startup_creates_unique_indexes(database, users_collection):
    # Entering the client runs the lifespan
    with TestClient(main.create_app(database)):
        indexes = users_collection.index_information()

    unique_fields = {
        info["key"][0][0] for info in indexes.values() if info.get("unique")
    }
    assert {"Username", "ApiKey"} <= unique_fields


def test_frontend_url_is_an_allowed_origin():
    assert main.Config.FRONTEND_URL in main.Config.CORS_ORIGINS
