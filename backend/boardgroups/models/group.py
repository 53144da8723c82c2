"""
models/group.py — Group record.

A Group belongs to exactly one User and only stores `game id → game name`
references; the full game records live in the global game table.
No I/O here. Accessors raise AppError so callers never see a silent None.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from backend.boardgroups.errors import AppError


def normalize_group_id(group_id: str) -> str:
    """Group ids end up inside document-store collection names, which are lower-case."""
    return group_id.strip().lower()


@dataclass(frozen=True)
class GroupInfo:
    """Group metadata without the games payload."""

    id: str
    name: str
    description: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}


@dataclass
class Group:
    id: str
    name: str
    description: str = ""
    games: dict[str, str] = field(default_factory=dict)

    @property
    def info(self) -> GroupInfo:
        return GroupInfo(id=self.id, name=self.name, description=self.description)

    def edit(self, name: str | None = None, description: str | None = None) -> GroupInfo:
        """Partial update: omitted or empty values keep the previous value."""
        if name:
            self.name = name
        if description:
            self.description = description
        return self.info

    def add_game(self, game_id: str, game_name: str) -> None:
        # Setting the same key twice is a no-op, which makes adds idempotent.
        self.games[game_id] = game_name

    def remove_game(self, game_id: str) -> str:
        """Drops the reference and returns the game name that was stored."""
        if game_id not in self.games:
            raise AppError.not_found(gameId=game_id, groupId=self.id)
        return self.games.pop(game_id)

    def summary(self) -> dict:
        """Shape used by list_user_groups: no games payload."""
        return {"name": self.name, "description": self.description}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "games": dict(self.games),
        }
