"""
middleware/auth_middleware.py — Bearer token extraction.

The @with_token decorator:
  1. Reads the Authorization header (expected: "Bearer <token>")
  2. Attaches the raw token to flask.g.token, or None when there is none
  3. Calls the view

Strict responsibility boundary:
  - This middleware extracts the token ONLY. It never resolves it and never
    raises on a missing one.
  - The Authentication Gate lives in the service layer (auth_service.authenticate),
    because only the service knows which user the call claims to act for.
    A missing token therefore surfaces as UNAUTHENTICATED "missing token"
    from the service, after request validation.

Error codes:
  BAD_REQUEST (400) — the header is present but not in "Bearer <token>" form
"""

from __future__ import annotations

import functools
from typing import Callable

from flask import g, request

from backend.boardgroups.errors import AppError


def with_token(f: Callable) -> Callable:
    """
    Route decorator that exposes the caller's bearer token as flask.g.token.

    Async views only: the wrapper is itself a coroutine function so that
    Flask recognises the view as async and runs it on an event loop.

    Usage:
        @users_bp.route("/<user_id>/groups", methods=["GET"])
        @with_token
        async def list_groups(user_id):
            await group_service.list_user_groups(_store(), g.token, user_id)
    """
    @functools.wraps(f)
    async def decorated(*args, **kwargs):
        g.token = extract_token()
        return await f(*args, **kwargs)

    return decorated


def extract_token() -> str | None:
    """
    Returns the token from the Authorization header, or None when absent.

    Separated from the decorator so tests can call it inside a
    test_request_context without wrapping a real view.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.strip():
        return None

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AppError.bad_request(
            {"Authorization": "must be in the format: Bearer <token>."}
        )
    return parts[1]
