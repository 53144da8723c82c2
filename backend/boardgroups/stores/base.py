"""
stores/base.py — Collection Store contract.

Two backends implement this class:
  - MemoryStore    (stores/memory_store.py)   transient, in-process
  - DocumentStore  (stores/document_store.py) remote Elasticsearch-style store

Both must be indistinguishable to callers: same error kinds, same
idempotence, same normalisation of user and group ids. The backend is
chosen once, at construction (see build_store in stores/factory.py), never by
a branch at call sites.

Error contract:
  NOT_FOUND       — any User/Group/Game lookup on an absent id
  ALREADY_EXISTS  — user id or (user, group) id collision on create
  FAIL            — transport failure talking to the remote store
  EXT_SVC_FAIL    — remote store answered with a server-side error

Stores never authenticate. The Authentication Gate (services/auth_service.py)
runs before any store call that is scoped to a user.
"""

from __future__ import annotations

import abc

from backend.boardgroups.models.game import GameRecord
from backend.boardgroups.models.group import Group, GroupInfo
from backend.boardgroups.models.user import User, UserInfo


class CollectionStore(abc.ABC):

    # ── Users ──────────────────────────────────────────────────────────────

    @abc.abstractmethod
    async def create_user(
            self,
            user_id: str,
            name: str,
            credential_hash: str | None = None,
    ) -> UserInfo:
        """Creates a user with no groups and mints a token bound to it."""

    @abc.abstractmethod
    async def get_user(self, user_id: str) -> User:
        """Returns the user with its groups populated."""

    @abc.abstractmethod
    async def list_user_ids(self) -> list[str]:
        """Every user id, in store order."""

    @abc.abstractmethod
    async def delete_user(self, user_id: str) -> UserInfo:
        """Removes the user with its groups, group-game references and tokens."""

    # ── Groups ─────────────────────────────────────────────────────────────

    @abc.abstractmethod
    async def create_group(
            self,
            user_id: str,
            group_id: str,
            name: str,
            description: str,
    ) -> GroupInfo:
        ...

    @abc.abstractmethod
    async def edit_group(
            self,
            user_id: str,
            group_id: str,
            name: str | None = None,
            description: str | None = None,
    ) -> GroupInfo:
        ...

    @abc.abstractmethod
    async def list_user_groups(self, user_id: str) -> dict[str, dict]:
        """`group id → {name, description}`; games are left out."""

    @abc.abstractmethod
    async def delete_group(self, user_id: str, group_id: str) -> GroupInfo:
        ...

    @abc.abstractmethod
    async def get_group_details(self, user_id: str, group_id: str) -> Group:
        ...

    # ── Games ──────────────────────────────────────────────────────────────

    @abc.abstractmethod
    async def add_game_to_group(
            self,
            user_id: str,
            group_id: str,
            game: GameRecord,
    ) -> GameRecord:
        """Upserts `game` globally, then references it from the group. Idempotent."""

    @abc.abstractmethod
    async def remove_game_from_group(
            self,
            user_id: str,
            group_id: str,
            game_id: str,
    ) -> GameRecord:
        """Drops the group's reference only; the global record survives."""

    @abc.abstractmethod
    async def get_game(self, game_id: str) -> GameRecord:
        ...

    # ── Tokens ─────────────────────────────────────────────────────────────

    @abc.abstractmethod
    async def create_token(self, user_id: str) -> str:
        ...

    @abc.abstractmethod
    async def token_to_user_id(self, token: str) -> str | None:
        """None when the token is unknown. Never raises NOT_FOUND."""

    @abc.abstractmethod
    async def get_user_token(self, user_id: str) -> str:
        """A token bound to the user; NOT_FOUND when there is none."""
