"""
schemas/group_schema.py — Marshmallow schemas for group endpoints.

Validation responsibility:
  - This file: field types, string lengths, non-empty checks (including trim).
  - The store:
      - NOT_FOUND      (user/group existence needs a lookup)
      - ALREADY_EXISTS (group id collision needs a lookup)

IMPORTANT: Inherits from marshmallow.Schema directly — never a Flask-bound
           schema — so these load without an application context.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from backend.boardgroups.schemas.auth_schema import id_field, validate_non_empty_after_trim


class CreateGroupSchema(Schema):
    """
    POST /users/:uid/groups

    groupId     : optional; the service generates one when absent
    name        : non-empty after trim, max 100 chars
    description : optional string, max 1000 chars, defaults to ""
    """

    group_id = id_field("groupId", required=False)

    name = fields.Str(
        required=True,
        validate=[
            validate.Length(
                min=1,
                max=100,
                error="Group name must be between 1 and 100 characters.",
            ),
            validate_non_empty_after_trim,
        ],
    )

    description = fields.Str(
        load_default="",
        validate=validate.Length(max=1000, error="Description must be at most 1000 characters."),
    )


class EditGroupSchema(Schema):
    """
    PATCH /users/:uid/groups/:gid

    Both fields optional. An omitted or empty value keeps the previous one,
    so only the type and the upper length bound are checked here.
    """

    name = fields.Str(
        validate=validate.Length(max=100, error="Group name must be at most 100 characters."),
    )
    description = fields.Str(
        validate=validate.Length(max=1000, error="Description must be at most 1000 characters."),
    )
