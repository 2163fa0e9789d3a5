# tests/test_roles.py

"""
Tests for the role table and the /roles endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from core.roles import (
    ROLES,
    get_all_roles,
    get_module_permissions,
    get_role_description,
    get_role_permissions,
    role_matrix,
)
from models.enums import Role


def test_every_role_is_defined():
    assert set(get_all_roles()) == set(Role.list())


def test_role_table_is_read_only():
    with pytest.raises(TypeError):
        ROLES["sales_agent"]["permissions"]["projects"]["edit"] = 1
    with pytest.raises(TypeError):
        ROLES["intruder"] = {}


def test_accessors():
    assert get_role_description("admin") == "Full system access"
    assert get_role_description(Role.sales_agent) == "Sales agent"
    assert get_role_description("ghost") is None
    assert get_role_permissions("ghost") is None
    assert get_module_permissions("sales_agent", "users") is None
    assert get_module_permissions("sales_agent", "quotations")["create"] == 1


def test_role_matrix_is_complete_and_boolean():
    matrix = role_matrix("sales_agent")
    assert matrix["projects"]["view"] is True
    assert matrix["projects"]["edit"] is False
    assert matrix["inventory"]["view"] is False
    assert all(isinstance(v, bool) for cells in matrix.values() for v in cells.values())


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------
def test_list_roles(client: TestClient, login_as, mock_current_user):
    login_as(mock_current_user)

    response = client.get("/roles")

    assert response.status_code == 200
    roles = {r["role"]: r for r in response.json()}
    assert set(roles) == set(Role.list())
    assert roles["operations"]["permissions"]["inventory"]["status"] is True


def test_get_unknown_role(client: TestClient, login_as, mock_current_user):
    login_as(mock_current_user)
    assert client.get("/roles/ghost").status_code == 404


def test_roles_require_users_view(client: TestClient, login_as, mock_sales_agent):
    login_as(mock_sales_agent)

    response = client.get("/roles")

    assert response.status_code == 403
    assert "users:view" in response.json()["detail"]


def test_roles_require_authentication(client: TestClient):
    assert client.get("/roles").status_code in (401, 403)


def test_permission_catalog(client: TestClient, login_as, mock_current_user):
    login_as(mock_current_user)

    response = client.get("/roles/catalog")

    assert response.status_code == 200
    body = response.json()
    assert {"key": "inventory", "label": "Stock"} in body["modules"]
    assert [a["key"] for a in body["actions"]] == ["view", "create", "edit", "delete", "export", "status"]
