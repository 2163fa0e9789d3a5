# tests/test_health.py

"""
Tests for the health endpoints and config validation.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from core.config import settings
from core.config_validator import validate_config_on_startup, validate_required_config
from conftest import make_query, with_tables


def test_health_app(client: TestClient):
    response = client.get("/health/app")

    assert response.status_code == 200
    assert response.json()["service"] == settings.PROJECT_NAME
    assert response.json()["status"] == "ok"


def test_health_db_ok(client: TestClient, mock_supabase_client):
    with patch("core.supabase_client.get_supabase_client", return_value=mock_supabase_client):
        response = client.get("/health/db")

    body = response.json()
    assert body["status"] == "ok"
    assert set(body["details"]["tables"]) == {settings.PROJECTS_TABLE, settings.COUNTIES_TABLE}


def test_health_db_degraded_when_a_table_fails(client: TestClient, mock_supabase_client):
    broken = make_query()
    broken.execute.side_effect = Exception("relation does not exist")
    with_tables(
        mock_supabase_client,
        **{settings.PROJECTS_TABLE: make_query([{"id": "p1"}]), settings.COUNTIES_TABLE: broken},
    )

    with patch("core.supabase_client.get_supabase_client", return_value=mock_supabase_client):
        response = client.get("/health/db")

    body = response.json()
    assert body["status"] == "degraded"
    assert body["details"]["tables"][settings.PROJECTS_TABLE]["rows_found"] == 1
    assert body["details"]["tables"][settings.COUNTIES_TABLE]["status"] == "error"


def test_health_db_not_configured(client: TestClient):
    with patch("core.supabase_client.get_supabase_client", return_value=None):
        response = client.get("/health/db")

    assert response.json()["status"] == "not_configured"


def test_missing_credentials_fail_outside_tests(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_URL", None)
    monkeypatch.setattr(settings, "ENV", "production")

    assert "SUPABASE_URL is not set" in validate_required_config()
    with pytest.raises(RuntimeError):
        validate_config_on_startup()


def test_negative_tolerance_is_rejected(monkeypatch):
    monkeypatch.setattr(settings, "IMPORT_DATE_TOLERANCE_SECONDS", -1)

    assert "IMPORT_DATE_TOLERANCE_SECONDS must not be negative" in validate_required_config()
