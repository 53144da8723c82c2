"""
schemas/game_schema.py — Marshmallow schemas for game endpoints.

IMPORTANT: Inherits from marshmallow.Schema directly.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from backend.boardgroups.clients.base import ORDER_BY_CHOICES
from backend.boardgroups.schemas.auth_schema import validate_non_empty_after_trim


class AddGameSchema(Schema):
    """POST /users/:uid/groups/:gid/games — the catalog id of the game to add."""

    game_id = fields.Str(
        required=True,
        data_key="gameId",
        validate=validate_non_empty_after_trim,
    )


class SearchGamesSchema(Schema):
    """
    GET /games/search?name=&limit=&order_by=

    Query-string values arrive as text, so limit is parsed, not strict.
    """

    name = fields.Str(required=True, validate=validate_non_empty_after_trim)

    limit = fields.Int(
        load_default=10,
        validate=validate.Range(min=1, max=100, error="limit must be between 1 and 100."),
    )

    order_by = fields.Str(
        load_default=None,
        validate=validate.OneOf(ORDER_BY_CHOICES),
    )
