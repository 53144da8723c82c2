"""
Unit tests for MemoryStore — the transient Collection Store backend.

Async store calls are driven with asyncio.run; no event-loop plugin needed.
"""

from __future__ import annotations

import asyncio

import pytest

from backend.boardgroups.errors import AppError, ErrorKind
from backend.boardgroups.stores.memory_store import MemoryStore, SeedUser

from ..fakes import AZUL, CATAN


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ann(store):
    """User a1/Ann with group g1 "RPG"."""
    info = run(store.create_user("a1", "Ann"))
    run(store.create_group("a1", "g1", "RPG", ""))
    return info


def _kind(coro) -> str:
    with pytest.raises(AppError) as exc_info:
        run(coro)
    return exc_info.value.kind


# ── Users and tokens ───────────────────────────────────────────────────────

class TestUsers:

    def test_create_user_issues_a_resolvable_token(self, store):
        info = run(store.create_user("a1", "Ann"))

        assert info.id == "a1"
        assert info.token
        assert run(store.token_to_user_id(info.token)) == "a1"

    def test_user_ids_are_case_insensitive(self, store):
        run(store.create_user("Ann", "Ann"))

        assert _kind(store.create_user("ANN ", "Other")) == ErrorKind.ALREADY_EXISTS
        assert run(store.get_user("aNN")).id == "ann"

    def test_unknown_user_is_not_found(self, store):
        with pytest.raises(AppError) as exc_info:
            run(store.get_user("Nobody"))
        assert exc_info.value.kind == ErrorKind.NOT_FOUND
        assert exc_info.value.info == {"userId": "nobody"}

    def test_unknown_token_resolves_to_none(self, store):
        assert run(store.token_to_user_id("not-a-token")) is None

    def test_user_may_hold_several_tokens(self, store, ann):
        second = run(store.create_token("a1"))

        assert second != ann.token
        assert run(store.token_to_user_id(second)) == "a1"
        assert run(store.token_to_user_id(ann.token)) == "a1"

    def test_get_user_token_returns_first_token(self, store, ann):
        assert run(store.get_user_token("A1")) == ann.token

    def test_delete_user_drops_groups_and_tokens_but_keeps_games(self, store, ann):
        run(store.add_game_to_group("a1", "g1", CATAN))

        deleted = run(store.delete_user("a1"))

        assert deleted.id == "a1"
        assert deleted.token is None
        assert run(store.token_to_user_id(ann.token)) is None
        assert run(store.list_user_ids()) == []
        assert run(store.get_game("catan-id")) == CATAN

    def test_deleted_user_id_can_be_registered_again(self, store, ann):
        run(store.delete_user("a1"))
        again = run(store.create_user("a1", "Ann again"))
        assert run(store.list_user_groups("a1")) == {}
        assert again.token != ann.token


# ── Groups ─────────────────────────────────────────────────────────────────

class TestGroups:

    def test_list_groups_has_no_games_payload(self, store, ann):
        run(store.add_game_to_group("a1", "g1", CATAN))

        assert run(store.list_user_groups("a1")) == {"g1": {"name": "RPG", "description": ""}}

    def test_duplicate_group_id_already_exists(self, store, ann):
        assert _kind(store.create_group("a1", "G1", "Other", "")) == ErrorKind.ALREADY_EXISTS

    def test_same_group_id_under_another_user_is_fine(self, store, ann):
        run(store.create_user("b2", "Bob"))
        info = run(store.create_group("b2", "g1", "Bob's", ""))
        assert info.id == "g1"

    def test_group_for_unknown_user_not_found(self, store):
        assert _kind(store.create_group("ghost", "g1", "RPG", "")) == ErrorKind.NOT_FOUND

    def test_edit_keeps_values_not_supplied(self, store, ann):
        info = run(store.edit_group("a1", "g1", None, "Role playing"))
        assert (info.name, info.description) == ("RPG", "Role playing")

        info = run(store.edit_group("a1", "g1", "Tabletop RPG", None))
        assert (info.name, info.description) == ("Tabletop RPG", "Role playing")

    def test_edit_missing_group_not_found(self, store, ann):
        assert _kind(store.edit_group("a1", "nope", "x", None)) == ErrorKind.NOT_FOUND

    def test_delete_group_returns_info(self, store, ann):
        info = run(store.delete_group("a1", "g1"))

        assert info.to_dict() == {"id": "g1", "name": "RPG", "description": ""}
        assert run(store.list_user_groups("a1")) == {}
        assert _kind(store.delete_group("a1", "g1")) == ErrorKind.NOT_FOUND

    def test_group_details_are_a_copy(self, store, ann):
        run(store.add_game_to_group("a1", "g1", CATAN))

        group = run(store.get_group_details("a1", "g1"))
        group.games.clear()
        group.name = "Changed"

        fresh = run(store.get_group_details("a1", "g1"))
        assert fresh.name == "RPG"
        assert fresh.games == {"catan-id": "Catan"}


# ── Games ──────────────────────────────────────────────────────────────────

class TestGames:

    def test_adding_a_game_twice_is_idempotent(self, store, ann):
        run(store.add_game_to_group("a1", "g1", CATAN))
        run(store.add_game_to_group("a1", "g1", CATAN))

        assert run(store.get_group_details("a1", "g1")).games == {"catan-id": "Catan"}

    def test_remove_game_returns_the_record(self, store, ann):
        run(store.add_game_to_group("a1", "g1", CATAN))

        assert run(store.remove_game_from_group("a1", "g1", "catan-id")) == CATAN
        assert run(store.get_group_details("a1", "g1")).games == {}

    def test_remove_game_not_in_group_even_if_cached(self, store, ann):
        run(store.create_group("a1", "g2", "Other", ""))
        run(store.add_game_to_group("a1", "g2", AZUL))

        with pytest.raises(AppError) as exc_info:
            run(store.remove_game_from_group("a1", "g1", "azul-id"))
        assert exc_info.value.kind == ErrorKind.NOT_FOUND
        assert exc_info.value.info == {"gameId": "azul-id", "groupId": "g1"}

    def test_get_unknown_game_not_found(self, store):
        assert _kind(store.get_game("nope")) == ErrorKind.NOT_FOUND


# ── Seed and reset ─────────────────────────────────────────────────────────

def test_reset_restores_seed_users():
    store = MemoryStore(seed=[SeedUser(user_id="Guest", name="Guest", token="guest-token")])
    run(store.create_user("a1", "Ann"))

    store.reset()

    assert run(store.list_user_ids()) == ["guest"]
    assert run(store.token_to_user_id("guest-token")) == "guest"


def test_two_stores_share_nothing():
    first, second = MemoryStore(), MemoryStore()
    run(first.create_user("a1", "Ann"))
    assert run(second.list_user_ids()) == []
