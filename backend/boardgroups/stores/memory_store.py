"""
stores/memory_store.py — Transient in-process Collection Store.

State lives on the instance (users, games, tokens), so every test or run
builds its own store and nothing leaks between them. All operations are
synchronous underneath and immediately consistent; they are exposed as
coroutines to honour the CollectionStore contract.

Callers always receive copies. Mutating a returned Group or User never
changes the stored state.

reset() restores the seed users given at construction (dev/test
convenience, not a durability mechanism).
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass

from backend.boardgroups.errors import AppError, ErrorKind
from backend.boardgroups.models.game import GameRecord
from backend.boardgroups.models.group import Group, GroupInfo, normalize_group_id
from backend.boardgroups.models.token import new_token
from backend.boardgroups.models.user import User, UserInfo, normalize_user_id
from backend.boardgroups.stores.base import CollectionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedUser:
    """A user (and its fixed token) present right after construction or reset()."""

    user_id: str
    name: str
    token: str


class MemoryStore(CollectionStore):

    def __init__(self, seed: list[SeedUser] | tuple[SeedUser, ...] = ()) -> None:
        self._seed = tuple(seed)
        self._users: dict[str, User] = {}
        self._games: dict[str, GameRecord] = {}
        self._tokens: dict[str, str] = {}
        self.reset()

    def reset(self) -> None:
        """Drops every user, game and token, then re-creates the seed users."""
        self._users = {}
        self._games = {}
        self._tokens = {}
        for seed_user in self._seed:
            user_id = normalize_user_id(seed_user.user_id)
            self._users[user_id] = User(id=user_id, display_name=seed_user.name)
            self._tokens[seed_user.token] = user_id

    # ── Private helpers ────────────────────────────────────────────────────

    def _user(self, user_id: str) -> User:
        """Returns the live User or raises NOT_FOUND."""
        user_id = normalize_user_id(user_id)
        user = self._users.get(user_id)
        if user is None:
            raise AppError.not_found(userId=user_id)
        return user

    def _group(self, user_id: str, group_id: str) -> Group:
        return self._user(user_id).get_group(normalize_group_id(group_id))

    # ── Users ──────────────────────────────────────────────────────────────

    async def create_user(
            self,
            user_id: str,
            name: str,
            credential_hash: str | None = None,
    ) -> UserInfo:
        user_id = normalize_user_id(user_id)
        if user_id in self._users:
            raise AppError.already_exists(userId=user_id)

        self._users[user_id] = User(
            id=user_id,
            display_name=name,
            credential_hash=credential_hash,
        )
        token = await self.create_token(user_id)
        logger.info("Created user %s", user_id)
        return UserInfo(id=user_id, name=name, token=token)

    async def get_user(self, user_id: str) -> User:
        return copy.deepcopy(self._user(user_id))

    async def list_user_ids(self) -> list[str]:
        return list(self._users)

    async def delete_user(self, user_id: str) -> UserInfo:
        user = self._user(user_id)
        del self._users[user.id]
        self._tokens = {t: uid for t, uid in self._tokens.items() if uid != user.id}
        logger.info("Deleted user %s with %d group(s)", user.id, len(user.groups))
        return UserInfo(id=user.id, name=user.display_name)

    # ── Groups ─────────────────────────────────────────────────────────────

    async def create_group(
            self,
            user_id: str,
            group_id: str,
            name: str,
            description: str,
    ) -> GroupInfo:
        group = Group(id=normalize_group_id(group_id), name=name, description=description)
        return self._user(user_id).add_group(group)

    async def edit_group(
            self,
            user_id: str,
            group_id: str,
            name: str | None = None,
            description: str | None = None,
    ) -> GroupInfo:
        return self._group(user_id, group_id).edit(name, description)

    async def list_user_groups(self, user_id: str) -> dict[str, dict]:
        user = self._user(user_id)
        return {gid: group.summary() for gid, group in user.groups.items()}

    async def delete_group(self, user_id: str, group_id: str) -> GroupInfo:
        return self._user(user_id).remove_group(normalize_group_id(group_id)).info

    async def get_group_details(self, user_id: str, group_id: str) -> Group:
        return copy.deepcopy(self._group(user_id, group_id))

    # ── Games ──────────────────────────────────────────────────────────────

    async def add_game_to_group(
            self,
            user_id: str,
            group_id: str,
            game: GameRecord,
    ) -> GameRecord:
        group = self._group(user_id, group_id)
        self._games[game.id] = game
        group.add_game(game.id, game.name)
        return game

    async def remove_game_from_group(
            self,
            user_id: str,
            group_id: str,
            game_id: str,
    ) -> GameRecord:
        self._group(user_id, group_id).remove_game(game_id)
        return await self.get_game(game_id)

    async def get_game(self, game_id: str) -> GameRecord:
        game = self._games.get(game_id)
        if game is None:
            raise AppError.not_found(gameId=game_id)
        return game

    # ── Tokens ─────────────────────────────────────────────────────────────

    async def create_token(self, user_id: str) -> str:
        token = new_token()
        self._tokens[token] = normalize_user_id(user_id)
        return token

    async def token_to_user_id(self, token: str) -> str | None:
        return self._tokens.get(token)

    async def get_user_token(self, user_id: str) -> str:
        user_id = normalize_user_id(user_id)
        for token, owner in self._tokens.items():
            if owner == user_id:
                return token
        raise AppError(ErrorKind.NOT_FOUND, "The user holds no token.", {"userId": user_id})
