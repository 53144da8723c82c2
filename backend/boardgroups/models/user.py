"""
models/user.py — User record.

A User owns its Groups by composition: dropping the user drops its groups.
Group id uniqueness is scoped to the owning user, enforced by add_group().
No I/O here.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from backend.boardgroups.errors import AppError
from backend.boardgroups.models.group import Group, GroupInfo


def normalize_user_id(user_id: str) -> str:
    """User ids are compared case-insensitively: stored stripped and lower-cased."""
    return user_id.strip().lower()


@dataclass(frozen=True)
class UserInfo:
    """Identity returned by registration, login and deletion."""

    id: str
    name: str
    token: str | None = None

    def to_dict(self) -> dict:
        payload = {"userId": self.id, "userName": self.name}
        if self.token is not None:
            payload["token"] = self.token
        return payload


@dataclass
class User:
    id: str
    display_name: str
    credential_hash: str | None = None
    groups: dict[str, Group] = field(default_factory=dict)

    def add_group(self, group: Group) -> GroupInfo:
        if group.id in self.groups:
            raise AppError.already_exists(userId=self.id, groupId=group.id)
        self.groups[group.id] = group
        return group.info

    def get_group(self, group_id: str) -> Group:
        group = self.groups.get(group_id)
        if group is None:
            raise AppError.not_found(userId=self.id, groupId=group_id)
        return group

    def remove_group(self, group_id: str) -> Group:
        group = self.get_group(group_id)
        del self.groups[group_id]
        return group

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id!r} display_name={self.display_name!r}>"
