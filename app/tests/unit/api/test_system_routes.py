"""Unit tests for system routes and the application factory."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from server import server


@pytest.mark.unit
def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.unit
def test_version_uses_git_sha(client, settings):
    settings.GIT_SHA = "abc123"
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": "abc123"}


@pytest.mark.unit
def test_rate_limit_exceeded(client):
    for _ in range(50):
        assert client.get("/health").status_code == 200
    response = client.get("/health")
    assert response.status_code == 429
    assert response.json() == {"message": "Rate limit exceeded"}


@pytest.mark.unit
class TestCorrelationIdMiddleware:
    def test_echoes_incoming_header(self):
        client = TestClient(server.create_app())
        response = client.get("/health", headers={"X-Correlation-ID": "req-42"})
        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_generates_id_when_missing(self):
        client = TestClient(server.create_app())
        response = client.get("/health")
        assert response.headers["X-Correlation-ID"]

    @patch("server.server.settings")
    def test_cors_allows_all_in_production(self, mock_settings):
        mock_settings.is_production = True
        client = TestClient(server.create_app())
        response = client.get("/health", headers={"Origin": "https://any.example"})
        assert response.headers["access-control-allow-origin"] in (
            "*",
            "https://any.example",
        )
