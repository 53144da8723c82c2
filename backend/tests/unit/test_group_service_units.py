"""
Unit tests for group_service — ordering of validation, gate and store call.

A failed gate must leave the store untouched, so several tests use an
AsyncMock store whose token lookup answers for another user.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from backend.boardgroups.errors import AppError, ErrorKind
from backend.boardgroups.services import group_service
from backend.boardgroups.stores.memory_store import MemoryStore

from ..fakes import CATAN, StubCatalog


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def token(store):
    return run(store.create_user("a1", "Ann")).token


@pytest.fixture
def catalog():
    return StubCatalog()


def _foreign_token_store() -> AsyncMock:
    store = AsyncMock()
    store.token_to_user_id.return_value = "someone-else"
    return store


# ── Groups ─────────────────────────────────────────────────────────────────

def test_create_group_with_explicit_id(store, token):
    result = run(group_service.create_group(store, token, "a1", "G1", " RPG ", None))

    assert result == {"id": "g1", "name": "RPG", "description": ""}
    assert run(group_service.list_user_groups(store, token, "a1")) == {
        "g1": {"name": "RPG", "description": ""},
    }


def test_create_group_generates_an_id(store, token):
    with patch.object(group_service, "_new_group_id", return_value="abc123"):
        result = run(group_service.create_group(store, token, "a1", None, "RPG"))
    assert result["id"] == "abc123"


def test_create_group_bad_request_comes_before_the_gate():
    store = _foreign_token_store()
    with pytest.raises(AppError) as exc_info:
        run(group_service.create_group(store, "tok", "a1", None, None, 7))

    assert exc_info.value.kind == ErrorKind.BAD_REQUEST
    assert set(exc_info.value.info) == {"name", "description"}
    store.token_to_user_id.assert_not_called()


@pytest.mark.parametrize(
    "call",
    [
        lambda store: group_service.create_group(store, "tok", "a1", "g1", "RPG"),
        lambda store: group_service.edit_group(store, "tok", "a1", "g1", "New"),
        lambda store: group_service.delete_group(store, "tok", "a1", "g1"),
        lambda store: group_service.remove_game_from_group(store, "tok", "a1", "g1", "catan-id"),
    ],
)
def test_gate_failure_leaves_the_store_untouched(call):
    store = _foreign_token_store()

    with pytest.raises(AppError) as exc_info:
        run(call(store))

    assert exc_info.value.kind == ErrorKind.UNAUTHENTICATED
    store.create_group.assert_not_called()
    store.edit_group.assert_not_called()
    store.delete_group.assert_not_called()
    store.remove_game_from_group.assert_not_called()


def test_missing_token_is_unauthenticated(store, token):
    with pytest.raises(AppError) as exc_info:
        run(group_service.list_user_groups(store, None, "a1"))
    assert exc_info.value.info == {"token": "missing token"}


def test_edit_group_empty_values_keep_previous(store, token):
    run(group_service.create_group(store, token, "a1", "g1", "RPG", "Dice"))

    result = run(group_service.edit_group(store, token, "a1", "g1", "  ", ""))

    assert result == {"id": "g1", "name": "RPG", "description": "Dice"}


def test_edit_group_blank_description_keeps_previous(store, token):
    run(group_service.create_group(store, token, "a1", "g1", "RPG", "Dice"))

    result = run(group_service.edit_group(store, token, "a1", "g1", None, "   "))

    assert result == {"id": "g1", "name": "RPG", "description": "Dice"}
    assert run(store.list_user_groups("a1")) == {"g1": {"name": "RPG", "description": "Dice"}}


def test_edit_group_trims_description(store, token):
    run(group_service.create_group(store, token, "a1", "g1", "RPG", "Dice"))

    result = run(group_service.edit_group(store, token, "a1", "g1", None, "  Cards  "))

    assert result["description"] == "Cards"


def test_delete_group_then_details_not_found(store, token):
    run(group_service.create_group(store, token, "a1", "g1", "RPG"))
    run(group_service.delete_group(store, token, "a1", "g1"))

    with pytest.raises(AppError) as exc_info:
        run(group_service.get_group_details(store, token, "a1", "g1"))
    assert exc_info.value.kind == ErrorKind.NOT_FOUND


# ── Group games ────────────────────────────────────────────────────────────

def test_add_game_resolves_through_catalog(store, token, catalog):
    run(group_service.create_group(store, token, "a1", "g1", "RPG"))

    result = run(group_service.add_game_to_group(store, catalog, token, "a1", "g1", " catan-id "))

    assert result == CATAN.to_dict()
    assert catalog.calls == [("resolve_by_id", "catan-id")]
    assert run(group_service.get_group_details(store, token, "a1", "g1"))["games"] == {
        "catan-id": "Catan",
    }


def test_add_unknown_game_not_found_and_group_unchanged(store, token, catalog):
    run(group_service.create_group(store, token, "a1", "g1", "RPG"))

    with pytest.raises(AppError) as exc_info:
        run(group_service.add_game_to_group(store, catalog, token, "a1", "g1", "nope"))

    assert exc_info.value.kind == ErrorKind.NOT_FOUND
    assert run(store.get_group_details("a1", "g1")).games == {}


def test_add_game_gate_failure_skips_catalog():
    store = _foreign_token_store()
    catalog = AsyncMock()

    with pytest.raises(AppError):
        run(group_service.add_game_to_group(store, catalog, "tok", "a1", "g1", "catan-id"))

    catalog.resolve_by_id.assert_not_called()
    store.add_game_to_group.assert_not_called()


def test_catalog_outage_propagates(store, token):
    run(group_service.create_group(store, token, "a1", "g1", "RPG"))
    catalog = AsyncMock()
    catalog.resolve_by_id.side_effect = AppError.ext_svc_fail(status=503)

    with pytest.raises(AppError) as exc_info:
        run(group_service.add_game_to_group(store, catalog, token, "a1", "g1", "catan-id"))
    assert exc_info.value.http_status == 502


def test_remove_game_returns_full_record(store, token, catalog):
    run(group_service.create_group(store, token, "a1", "g1", "RPG"))
    run(group_service.add_game_to_group(store, catalog, token, "a1", "g1", "catan-id"))

    result = run(group_service.remove_game_from_group(store, token, "a1", "g1", "catan-id"))

    assert result["name"] == "Catan"
    assert result["mechanics"] == ["Dice Rolling", "Trading"]
