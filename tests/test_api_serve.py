"""Tests for the ``pocketdrive serve`` API app."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def api_app(local_settings):
    from pocketdrive.api.serve import create_api_app

    with patch("pocketdrive.config.get_settings", return_value=local_settings):
        yield create_api_app()


@pytest.fixture
def client(api_app, session_manager):
    with patch("pocketdrive.sessions._manager", session_manager):
        yield TestClient(api_app)


class TestAPIAppStructure:
    def test_openapi_json(self, client):
        resp = client.get("/api/v1/openapi.json")
        assert resp.status_code == 200
        data = resp.json()
        assert data["info"]["title"] == "pocketdrive API"
        assert "/api/v1/files/browse" in data["paths"]

    def test_docs_page(self, client):
        resp = client.get("/api/v1/docs")
        assert resp.status_code == 200

    def test_browse_mounted(self, client):
        resp = client.get("/api/v1/files/browse")
        assert resp.status_code == 200
        assert resp.json()["heading"] == "Root"

    def test_cors_localhost(self, client):
        resp = client.options(
            "/api/v1/files/browse",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert resp.headers.get("access-control-allow-origin") == "http://localhost:5173"
