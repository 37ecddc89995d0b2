# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

from typing import Generator
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

import core.supabase_client as supabase_client
from core.rate_limiter import reset_rate_limits
from main import create_app
from tests.utils.fake_supabase import FakeSupabase
from tests.utils.helpers import (
    ADMIN_ID,
    INACTIVE_STAFF_ID,
    OTHER_STAFF_ID,
    OTHER_USER_ID,
    STAFF_ID,
    USER_ID,
    bearer,
)


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_db(monkeypatch) -> FakeSupabase:
    """
    In-memory Supabase installed as the service-role client, seeded with
    one admin, two active staff, one inactive staff and two users.
    """
    db = FakeSupabase()
    db.seed("admins", [{"id": ADMIN_ID, "email": "admin@example.com", "name": "Asha Admin"}])
    db.seed("crm_staff", [
        {"id": STAFF_ID, "email": "ravi@example.com", "name": "Ravi", "is_active": True},
        {"id": OTHER_STAFF_ID, "email": "meera@example.com", "name": "Meera", "is_active": True},
        {"id": INACTIVE_STAFF_ID, "email": "old@example.com", "name": "Former", "is_active": False},
    ])
    db.seed("user_profiles", [
        {"id": USER_ID, "name": "Priya", "phone": "+91 98765 43210", "email": "priya@example.com", "is_nri": False},
        {"id": OTHER_USER_ID, "name": "John", "phone": "+1 555 010 9999", "email": "john@example.com", "is_nri": True},
    ])

    db.auth.add_user("admin-token", ADMIN_ID, "admin@example.com")
    db.auth.add_user("staff-token", STAFF_ID, "ravi@example.com")
    db.auth.add_user("other-staff-token", OTHER_STAFF_ID, "meera@example.com")
    db.auth.add_user("inactive-staff-token", INACTIVE_STAFF_ID, "old@example.com")
    db.auth.add_user("user-token", USER_ID, "priya@example.com")
    db.auth.add_user("other-user-token", OTHER_USER_ID, "john@example.com")

    monkeypatch.setattr(supabase_client, "_service_client", db)
    return db


@pytest.fixture
def admin_headers():
    return bearer("admin-token")


@pytest.fixture
def staff_headers():
    return bearer("staff-token")


@pytest.fixture
def user_headers():
    return bearer("user-token")


@pytest.fixture
def role_client(fake_db):
    """
    Anon-key role client: shares the fake tables, with a Mock auth so
    each test scripts the credential exchange.
    """
    role = FakeSupabase(tables=fake_db.tables)
    role.auth = Mock()
    role.auth.get_session.return_value = None
    return role


@pytest.fixture(autouse=True)
def reset_limits():
    """Reset rate limiter state before each test."""
    reset_rate_limits()
    yield
    reset_rate_limits()
