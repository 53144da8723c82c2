"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - Tests run the real Flask app (create_app("testing")) through its test
    client. The store is a MemoryStore, the catalog a StubCatalog, both
    injected into the factory, so nothing leaves the process.
  - The app is created once per session. Between tests the store is reset,
    so tests are isolated.
  - `docstore_app` builds a second app on the DocumentStore backend against
    the in-process fake server, for the same HTTP flows on the remote backend.

Helper functions (not fixtures) are provided for common operations:
  - register(client, ...)    → {"userId", "userName", "token"}
  - auth_headers(token)      → {"Authorization": "Bearer <token>"}
  - make_group(client, ...)  → group dict
  - add_game(client, ...)    → HTTP response

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test.
"""

from __future__ import annotations

import pytest

from backend.boardgroups import create_app
from backend.boardgroups.stores.document_store import DocumentStore
from backend.boardgroups.stores.memory_store import MemoryStore

from ..fakes import FakeDocumentServer, StubCatalog


# ═══════════════════════════════════════════════════════════════════════════
# App fixtures
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def store():
    return MemoryStore()


@pytest.fixture(scope="session")
def catalog():
    return StubCatalog()


@pytest.fixture(scope="session")
def app(store, catalog):
    """The Flask application in 'testing' mode, once for the whole session."""
    return create_app("testing", store=store, catalog=catalog)


@pytest.fixture(autouse=True)
def reset_store(store, catalog):
    """Empties the store and the catalog call log after every test."""
    yield
    store.reset()
    catalog.calls.clear()


@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


@pytest.fixture
def docstore_server():
    return FakeDocumentServer()


@pytest.fixture
def docstore_client(docstore_server, catalog):
    """Test client for an app on the DocumentStore backend (fresh per test)."""
    store = DocumentStore(
        base_url="http://docstore.test",
        index_prefix="it",
        transport=docstore_server.transport(),
    )
    return create_app("testing", store=store, catalog=catalog).test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def register(
    client,
    user_id: str = "a1",
    user_name: str = "Ann",
    password: str | None = "Password1",
) -> dict:
    """
    Registers a new user and returns the response data dict.
    Returns: {"userId": ..., "userName": ..., "token": ...}
    """
    payload = {"userId": user_id, "userName": user_name}
    if password is not None:
        payload["password"] = password
    resp = client.post("/api/v1/users", json=payload)
    assert resp.status_code == 201, f"register failed: {resp.get_json()}"
    return resp.get_json()["data"]


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def make_group(
    client,
    token: str,
    user_id: str = "a1",
    group_id: str | None = "g1",
    name: str = "RPG",
    description: str | None = None,
) -> dict:
    """Creates a group and returns the group data dict."""
    payload: dict = {"name": name}
    if group_id is not None:
        payload["groupId"] = group_id
    if description is not None:
        payload["description"] = description
    resp = client.post(
        f"/api/v1/users/{user_id}/groups",
        json=payload,
        headers=auth_headers(token),
    )
    assert resp.status_code == 201, f"make_group failed: {resp.get_json()}"
    return resp.get_json()["data"]


def add_game(client, token: str, game_id: str, user_id: str = "a1", group_id: str = "g1"):
    """Adds a catalog game to a group. Returns the HTTP response."""
    return client.post(
        f"/api/v1/users/{user_id}/groups/{group_id}/games",
        json={"gameId": game_id},
        headers=auth_headers(token),
    )
