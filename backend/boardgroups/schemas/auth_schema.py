"""
schemas/auth_schema.py — Marshmallow schemas for registration and login.

Validation responsibility:
  - This file: field presence, types, lengths, id format.
  - services/auth_service.py: ALREADY_EXISTS (needs a store lookup) and
    credential checks (UNAUTHENTICATED).

Ids become part of document-store collection names, hence the restricted
character set (letters, digits, '_', '.', '-', not starting with a symbol).

IMPORTANT: Inherits from marshmallow.Schema directly, so schemas load
without a Flask application context.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate

ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"
ID_FORMAT_ERROR = "Must start with a letter or digit and contain only letters, digits, '_', '.' or '-'."


def validate_non_empty_after_trim(value: str) -> None:
    """Rejects blank or whitespace-only strings."""
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


def id_field(data_key: str, required: bool = True) -> fields.Str:
    """Shared definition for externally supplied user and group ids."""
    return fields.Str(
        required=required,
        data_key=data_key,
        validate=[
            validate.Length(min=1, max=64, error="Must be between 1 and 64 characters."),
            validate.Regexp(ID_PATTERN, error=ID_FORMAT_ERROR),
        ],
    )


class RegisterSchema(Schema):
    """
    POST /users

    userId   : 1–64 chars, id format; normalised to lower case by the store
    userName : non-empty after trim, max 100 chars
    password : optional, 8–128 chars. Users registered without one cannot log in.
    """

    user_id = id_field("userId")

    user_name = fields.Str(
        required=True,
        data_key="userName",
        validate=[
            validate.Length(min=1, max=100, error="User name must be between 1 and 100 characters."),
            validate_non_empty_after_trim,
        ],
    )

    password = fields.Str(
        load_only=True,
        validate=validate.Length(
            min=8,
            max=128,
            error="Password must be between 8 and 128 characters.",
        ),
    )


class LoginSchema(Schema):
    """
    POST /users/login

    Credential correctness is checked in auth_service.py (UNAUTHENTICATED).
    """

    user_id = fields.Str(required=True, data_key="userId")
    password = fields.Str(required=True, load_only=True)
