"""Smoke tests for FastAPI app startup and /health endpoint."""

import pytest
from fastapi.testclient import TestClient

from radio_app.main import app


@pytest.fixture(autouse=True)
def _use_tmp_db(monkeypatch, tmp_path):
    monkeypatch.setenv("DB_PATH", str(tmp_path / "test.db"))
    from radio_app.config import get_settings
    get_settings.cache_clear()


def test_health_returns_ok():
    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "version" in data


def test_health_version_matches_app():
    client = TestClient(app)
    response = client.get("/health")
    data = response.json()
    assert data["version"] == app.version


def test_startup_selects_default_station():
    with TestClient(app) as c:
        response = c.get("/api/player")
        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "active"
        assert data["station"]["id"] == "liquid_radio"
        assert data["play"] is False
        assert data["reload_count"] == 1
