"""Pytest fixtures for backend tests."""

from __future__ import annotations

import os
from collections.abc import Iterator
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient


def _set_default_env() -> None:
    os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
    os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
    os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key")
    os.environ.setdefault("ENABLE_SCHEDULER", "false")


# Settings are read at import time, so the environment must exist before any
# test module imports the application package.
_set_default_env()

from fakes import FakeSupabaseClient  # noqa: E402


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a FastAPI test client."""
    from cad_api.main import app

    return TestClient(app)


@pytest.fixture
def db() -> FakeSupabaseClient:
    """Return an empty in-memory Supabase client."""
    return FakeSupabaseClient()


@pytest.fixture
def owner_id(db: FakeSupabaseClient) -> str:
    """Seed a community owner."""
    return db.add_user("Chief")


@pytest.fixture
def community_id(db: FakeSupabaseClient, owner_id: str) -> str:
    """Seed a community owned by ``owner_id`` with the owner as its only member."""
    cid = db.add_community(owner_id, members_count=1)
    db.add_membership(owner_id, cid, "approved")
    return cid


@pytest.fixture
def api(db: FakeSupabaseClient) -> Iterator[SimpleNamespace]:
    """Test client wired to the fake store with a switchable current user."""
    from cad_api.dependencies import get_current_user, get_db_client
    from cad_api.main import app

    state = SimpleNamespace(user_id=None, http=None)
    app.dependency_overrides[get_db_client] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: SimpleNamespace(id=state.user_id)
    state.http = TestClient(app)
    try:
        yield state
    finally:
        app.dependency_overrides.clear()
