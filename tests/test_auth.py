# tests/test_auth.py

"""
Tests for bearer-token authentication.
"""

from types import SimpleNamespace
from unittest.mock import Mock, patch

from fastapi.testclient import TestClient

from dependencies.auth import DEFAULT_ROLE, current_user_from_auth_user


def auth_user(**metadata):
    return SimpleNamespace(id="user-1", email="agent@example.com", user_metadata=metadata)


def test_current_user_from_metadata():
    user = current_user_from_auth_user(auth_user(
        role="operations",
        organization_id="org-1",
        full_name="Ana",
        custom_permissions={"projects": {"create": 1}},
    ))

    assert user.role == "operations"
    assert user.organization_id == "org-1"
    assert user.custom_permissions == {"projects": {"create": 1}}


def test_unknown_or_missing_role_falls_back():
    assert current_user_from_auth_user(auth_user(role="overlord")).role == DEFAULT_ROLE
    assert current_user_from_auth_user(auth_user()).role == DEFAULT_ROLE


def test_malformed_custom_permissions_are_dropped():
    user = current_user_from_auth_user(auth_user(custom_permissions=["nope"]))
    assert user.custom_permissions is None


def test_valid_token(client: TestClient):
    with patch("dependencies.auth.get_supabase_client") as mock_supabase:
        mock_client = Mock()
        mock_client.auth.get_user.return_value = SimpleNamespace(
            user=auth_user(role="sales_agent", organization_id="org-1")
        )
        mock_supabase.return_value = mock_client

        response = client.get(
            "/users/me/permissions",
            headers={"Authorization": "Bearer test-token"},
        )

    assert response.status_code == 200
    assert response.json()["role"] == "sales_agent"
    mock_client.auth.get_user.assert_called_once_with("test-token")


def test_invalid_token(client: TestClient):
    with patch("dependencies.auth.get_supabase_client") as mock_supabase:
        mock_client = Mock()
        mock_client.auth.get_user.side_effect = Exception("JWT expired")
        mock_supabase.return_value = mock_client

        response = client.get(
            "/users/me/permissions",
            headers={"Authorization": "Bearer expired"},
        )

    assert response.status_code == 401


def test_missing_token(client: TestClient):
    response = client.get("/users/me/permissions")
    assert response.status_code in (401, 403)
