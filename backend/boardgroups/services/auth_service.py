"""
services/auth_service.py — Registration, login and the Authentication Gate.

Responsibilities:
  - User registration (validation, bcrypt hashing, token issued by the store)
  - Credential check at login, returning the user's existing token
  - authenticate(): the gate every user-scoped service call passes first
  - User deletion (gate, then cascade in the store)

Layer rules:
  - No Flask imports. Services receive the store as an argument.
  - The gate raises before any store mutation, so failed authentication
    never has a side effect.

Token design:
  - Opaque uuid4 text minted by the store at registration.
  - No expiry, no rate limiting: valid until the owning user is deleted.

Password storage:
  - Hashed with bcrypt; the raw password is never stored, never logged.
"""

from __future__ import annotations

import logging

import bcrypt

from backend.boardgroups.errors import AppError, ErrorKind
from backend.boardgroups.models.user import normalize_user_id
from backend.boardgroups.schemas.auth_schema import LoginSchema, RegisterSchema
from backend.boardgroups.schemas.validation import load_or_raise
from backend.boardgroups.stores.base import CollectionStore

logger = logging.getLogger(__name__)

MISSING_TOKEN = "missing token"
TOKEN_USER_MISMATCH = "token/user mismatch"


# ── Private helpers ────────────────────────────────────────────────────────

def _hash_password(password: str, rounds: int) -> str:
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=rounds),
    ).decode("utf-8")


def _invalid_credentials() -> AppError:
    # Same error for unknown user and wrong password: no user enumeration.
    return AppError(
        ErrorKind.UNAUTHENTICATED,
        "The user id or password is incorrect.",
        {"credentials": "invalid user or password"},
    )


# ── Authentication Gate ────────────────────────────────────────────────────

async def authenticate(store: CollectionStore, token: str | None, user_id: str) -> str:
    """
    Checks that `token` belongs to the claimed `user_id`.

    Raises:
      AppError(UNAUTHENTICATED) — no token ("missing token"), or the token is
                                  unknown or bound to another user
                                  ("token/user mismatch").

    Returns: the normalised user id.
    """
    if not token:
        raise AppError.unauthenticated(MISSING_TOKEN)

    user_id = normalize_user_id(user_id or "")
    if await store.token_to_user_id(token) != user_id:
        logger.info("Rejected token for user %s", user_id)
        raise AppError.unauthenticated(TOKEN_USER_MISMATCH)
    return user_id


# ── Public service functions ───────────────────────────────────────────────

async def register_user(
        store: CollectionStore,
        user_id: str | None,
        user_name: str | None,
        password: str | None = None,
        rounds: int = 12,
) -> dict:
    """
    Creates a new user and returns its identity with a freshly minted token.

    Raises:
      AppError(BAD_REQUEST)    — every invalid field at once
      AppError(ALREADY_EXISTS) — user id taken (after case normalisation)

    Returns: {"userId": ..., "userName": ..., "token": ...}
    """
    data = load_or_raise(RegisterSchema(), {
        "userId": user_id,
        "userName": user_name,
        "password": password,
    })

    credential_hash = None
    if data.get("password"):
        credential_hash = _hash_password(data["password"], rounds)

    info = await store.create_user(data["user_id"], data["user_name"].strip(), credential_hash)
    return info.to_dict()


async def login_user(store: CollectionStore, user_id: str | None, password: str | None) -> dict:
    """
    Validates credentials and returns the user's token.

    Raises:
      AppError(BAD_REQUEST)     — missing fields
      AppError(UNAUTHENTICATED) — unknown user, no password set, or wrong password

    Returns: {"userId": ..., "userName": ..., "token": ...}
    """
    data = load_or_raise(LoginSchema(), {"userId": user_id, "password": password})

    try:
        user = await store.get_user(data["user_id"])
    except AppError as exc:
        if exc.kind != ErrorKind.NOT_FOUND:
            raise
        raise _invalid_credentials() from exc

    if user.credential_hash is None or not bcrypt.checkpw(
            data["password"].encode("utf-8"),
            user.credential_hash.encode("utf-8"),
    ):
        raise _invalid_credentials()

    token = await store.get_user_token(user.id)
    return {"userId": user.id, "userName": user.display_name, "token": token}


async def delete_user(store: CollectionStore, token: str | None, user_id: str) -> dict:
    """
    Deletes the user together with its groups and tokens. Global game
    records are kept.

    Raises:
      AppError(UNAUTHENTICATED) — gate failure, nothing is deleted
      AppError(NOT_FOUND)       — user already gone
      AppError(FAIL)            — cascade interrupted (document store); info
                                  lists the collections still pending

    Returns: {"userId": ..., "userName": ...}
    """
    user_id = await authenticate(store, token, user_id)
    info = await store.delete_user(user_id)
    return info.to_dict()
