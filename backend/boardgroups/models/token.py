"""
models/token.py — Bearer token record.

Tokens are opaque random UUIDs mapping to exactly one user id. A user may
hold several tokens. Tokens never expire; they are destroyed together with
their owning user.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass


def new_token() -> str:
    """uuid4 text: random, unguessable, fixed format."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Token:
    token: str
    user_id: str

    def to_dict(self) -> dict:
        return {"userId": self.user_id}
