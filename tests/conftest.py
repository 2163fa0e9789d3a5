# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os

# Startup config validation only warns under ENV=test
os.environ.setdefault("ENV", "test")

import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock
from typing import Generator

from main import create_app
from dependencies.auth import CurrentUser, get_current_user


ORG_ID = "9b2f4f7e-3c1a-4c55-9d0e-1f2a3b4c5d6e"
OTHER_ORG_ID = "0e9d8c7b-6a5f-4e3d-8c2b-1a0f9e8d7c6b"


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    app = create_app()
    yield app
    app.dependency_overrides = {}


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


def make_user(role: str, custom_permissions=None, organization_id=ORG_ID) -> CurrentUser:
    return CurrentUser(
        id=f"{role}-user-id",
        email=f"{role}@example.com",
        role=role,
        organization_id=organization_id,
        custom_permissions=custom_permissions,
    )


@pytest.fixture
def mock_current_user():
    """Admin of the test organization."""
    return make_user("admin")


@pytest.fixture
def mock_sales_agent():
    return make_user("sales_agent")


@pytest.fixture
def mock_operations_user():
    return make_user("operations")


@pytest.fixture
def login_as(app):
    """Pretend auth already succeeded for the given user."""
    def _login(user: CurrentUser):
        app.dependency_overrides[get_current_user] = lambda: user
        return user
    return _login


# ------------------------------------------------------------------
# Supabase mocks
# ------------------------------------------------------------------
QUERY_METHODS = ("select", "eq", "order", "limit", "ilike", "insert", "update", "delete")


def make_query(data=None) -> Mock:
    """Chainable PostgREST-style query whose execute() returns `data`."""
    query = Mock()
    for name in QUERY_METHODS:
        getattr(query, name).return_value = query
    query.execute.return_value = Mock(data=data)
    return query


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = Mock()
    mock_client.table.return_value = make_query([])
    return mock_client


def with_tables(mock_client: Mock, **tables: Mock) -> Mock:
    """Route client.table(<name>) to a dedicated query mock per table."""
    mock_client.table.side_effect = lambda name: tables[name]
    return mock_client
