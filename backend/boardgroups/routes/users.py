"""
routes/users.py — User route handlers.

Layer rules:
  - Parse the request, call exactly ONE service function, return the
    standard response envelope: {"data": {...}, "warnings": []}
  - No business logic. No store access beyond handing the store over.
  - AppError propagates to the global error handler in
    boardgroups/__init__.py. Routes never catch it.

Endpoints (base url_prefix=/api/v1/users):
  POST   /users          → 201  register (no auth)
  POST   /users/login    → 200  exchange credentials for the user's token
  DELETE /users/:uid     → 200  delete user, its groups and tokens
"""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from backend.boardgroups.extensions import get_store
from backend.boardgroups.middleware.auth_middleware import with_token
from backend.boardgroups.services import auth_service

users_bp = Blueprint("users", __name__)


def json_body() -> dict:
    """The JSON object in the request body; {} when absent or not an object."""
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


@users_bp.route("", methods=["POST"])
async def register():
    """POST /users — Create a user; the response carries its token."""
    body = json_body()
    result = await auth_service.register_user(
        get_store(),
        user_id=body.get("userId"),
        user_name=body.get("userName"),
        password=body.get("password"),
        rounds=current_app.config["BCRYPT_LOG_ROUNDS"],
    )
    return jsonify({"data": result, "warnings": []}), 201


@users_bp.route("/login", methods=["POST"])
async def login():
    """POST /users/login — Check the password; return the user's token."""
    body = json_body()
    result = await auth_service.login_user(
        get_store(),
        user_id=body.get("userId"),
        password=body.get("password"),
    )
    return jsonify({"data": result, "warnings": []}), 200


@users_bp.route("/<user_id>", methods=["DELETE"])
@with_token
async def delete_user(user_id: str):
    """DELETE /users/:uid — Owner only."""
    result = await auth_service.delete_user(get_store(), g.token, user_id)
    return jsonify({"data": result, "warnings": []}), 200
