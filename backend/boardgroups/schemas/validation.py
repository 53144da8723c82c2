"""
schemas/validation.py — Turns marshmallow errors into BAD_REQUEST.

marshmallow collects every failing field in one pass. load_or_raise keeps
that property: the resulting AppError.info maps each violating field to its
reason, so a caller sees every problem in one round trip.

Values that are None are treated as absent, so a required field passed as
None reports "Missing data for required field." rather than a null error.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError

from backend.boardgroups.errors import AppError


def _first_message(messages) -> str:
    if isinstance(messages, dict):
        # Nested schema errors: report the first nested reason.
        return _first_message(next(iter(messages.values()), "Invalid value."))
    if isinstance(messages, (list, tuple)):
        return str(messages[0]) if messages else "Invalid value."
    return str(messages)


def load_or_raise(schema: Schema, data: dict) -> dict:
    """
    Loads `data` through `schema`.

    Raises:
      AppError(BAD_REQUEST) — info is {field: reason} for every violation.
    """
    present = {key: value for key, value in data.items() if value is not None}
    try:
        return schema.load(present)
    except ValidationError as exc:
        messages = exc.messages
        if isinstance(messages, dict):
            info = {field: _first_message(reasons) for field, reasons in messages.items()}
        else:
            info = {"_schema": _first_message(messages)}
        raise AppError.bad_request(info) from exc
