"""
services/group_service.py — Group and group-game use cases.

Every function follows the same sequence:
  1. structural validation (BAD_REQUEST, all fields at once)
  2. Authentication Gate   (UNAUTHENTICATED, before any store call)
  3. catalog lookup        (add_game_to_group only)
  4. exactly one Collection Store operation

Ownership is enforced by the gate alone: a token may only act on the groups
of the user it resolves to. The store itself does not authenticate.

Layer rules:
  - No Flask imports. The store and the catalog client arrive as arguments.
  - Returns plain dicts in wire shape; routes wrap them in the envelope.
"""

from __future__ import annotations

import secrets

from backend.boardgroups.clients.base import CatalogClient
from backend.boardgroups.schemas.game_schema import AddGameSchema
from backend.boardgroups.schemas.group_schema import CreateGroupSchema, EditGroupSchema
from backend.boardgroups.schemas.validation import load_or_raise
from backend.boardgroups.services.auth_service import authenticate
from backend.boardgroups.stores.base import CollectionStore


def _new_group_id() -> str:
    return secrets.token_hex(6)


# ── Groups ─────────────────────────────────────────────────────────────────

async def create_group(
        store: CollectionStore,
        token: str | None,
        user_id: str,
        group_id: str | None,
        name: str | None,
        description: str | None = None,
) -> dict:
    """
    Creates an empty group for the user. A group id is generated when none
    is supplied.

    Raises:
      AppError(BAD_REQUEST)     — invalid name/description/groupId
      AppError(UNAUTHENTICATED) — gate failure
      AppError(NOT_FOUND)       — user does not exist
      AppError(ALREADY_EXISTS)  — the user already has a group with this id

    Returns: {"id": ..., "name": ..., "description": ...}
    """
    data = load_or_raise(CreateGroupSchema(), {
        "groupId": group_id,
        "name": name,
        "description": description,
    })
    user_id = await authenticate(store, token, user_id)

    info = await store.create_group(
        user_id,
        data.get("group_id") or _new_group_id(),
        data["name"].strip(),
        data["description"],
    )
    return info.to_dict()


async def edit_group(
        store: CollectionStore,
        token: str | None,
        user_id: str,
        group_id: str,
        name: str | None = None,
        description: str | None = None,
) -> dict:
    """
    Partial update. Omitted or empty values keep what the group had.

    Raises:
      AppError(BAD_REQUEST)     — a supplied value is not a string
      AppError(UNAUTHENTICATED) — gate failure
      AppError(NOT_FOUND)       — user or group does not exist

    Returns: {"id": ..., "name": ..., "description": ...}
    """
    data = load_or_raise(EditGroupSchema(), {"name": name, "description": description})
    user_id = await authenticate(store, token, user_id)

    new_name = data.get("name", "").strip() or None
    new_description = data.get("description", "").strip() or None
    info = await store.edit_group(user_id, group_id, new_name, new_description)
    return info.to_dict()


async def list_user_groups(store: CollectionStore, token: str | None, user_id: str) -> dict:
    """
    Returns: {group_id: {"name": ..., "description": ...}} — no games payload.
    """
    user_id = await authenticate(store, token, user_id)
    return await store.list_user_groups(user_id)


async def delete_group(store: CollectionStore, token: str | None, user_id: str, group_id: str) -> dict:
    """
    Deletes the group and its game references. Global game records stay.

    Returns: {"id": ..., "name": ..., "description": ...} of the deleted group.
    """
    user_id = await authenticate(store, token, user_id)
    info = await store.delete_group(user_id, group_id)
    return info.to_dict()


async def get_group_details(store: CollectionStore, token: str | None, user_id: str, group_id: str) -> dict:
    """
    Returns: {"id", "name", "description", "games": {game_id: game_name}}
    """
    user_id = await authenticate(store, token, user_id)
    group = await store.get_group_details(user_id, group_id)
    return group.to_dict()


# ── Group games ────────────────────────────────────────────────────────────

async def add_game_to_group(
        store: CollectionStore,
        catalog: CatalogClient,
        token: str | None,
        user_id: str,
        group_id: str,
        game_id: str | None,
) -> dict:
    """
    Resolves `game_id` through the catalog, then stores the record and
    references it from the group. Adding the same game twice is harmless.

    Raises:
      AppError(BAD_REQUEST)     — missing/blank gameId
      AppError(UNAUTHENTICATED) — gate failure
      AppError(NOT_FOUND)       — unknown game in the catalog, or no such user/group
      AppError(EXT_SVC_FAIL)    — catalog unreachable

    Returns: the full game record that was stored.
    """
    data = load_or_raise(AddGameSchema(), {"gameId": game_id})
    user_id = await authenticate(store, token, user_id)

    game = await catalog.resolve_by_id(data["game_id"].strip())
    stored = await store.add_game_to_group(user_id, group_id, game)
    return stored.to_dict()


async def remove_game_from_group(
        store: CollectionStore,
        token: str | None,
        user_id: str,
        group_id: str,
        game_id: str,
) -> dict:
    """
    Drops the group's reference to the game.

    Raises:
      AppError(NOT_FOUND) — the group holds no such game, even when the game
                            exists in the global table

    Returns: the full game record that was referenced.
    """
    user_id = await authenticate(store, token, user_id)
    game = await store.remove_game_from_group(user_id, group_id, game_id)
    return game.to_dict()
