"""
routes/groups.py — Group and group-game route handlers.

Layer rules:
  - Parse, call ONE service, return envelope.
  - The token goes to the service untouched; the service runs the
    Authentication Gate after validating the body.

Endpoints (base url_prefix=/api/v1/users):
  GET    /users/:uid/groups                     → 200  list groups (no games)
  POST   /users/:uid/groups                     → 201  create group
  GET    /users/:uid/groups/:gid                → 200  group with its games
  PATCH  /users/:uid/groups/:gid                → 200  edit name/description
  DELETE /users/:uid/groups/:gid                → 200  delete group
  POST   /users/:uid/groups/:gid/games          → 201  add a catalog game
  DELETE /users/:uid/groups/:gid/games/:game    → 200  remove a game
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify

from backend.boardgroups.extensions import get_catalog, get_store
from backend.boardgroups.middleware.auth_middleware import with_token
from backend.boardgroups.routes.users import json_body
from backend.boardgroups.services import group_service

groups_bp = Blueprint("groups", __name__)


@groups_bp.route("/<user_id>/groups", methods=["GET"])
@with_token
async def list_groups(user_id: str):
    """GET /users/:uid/groups — {groupId: {name, description}}."""
    result = await group_service.list_user_groups(get_store(), g.token, user_id)
    return jsonify({"data": result, "warnings": []}), 200


@groups_bp.route("/<user_id>/groups", methods=["POST"])
@with_token
async def create_group(user_id: str):
    """POST /users/:uid/groups — groupId is generated when omitted."""
    body = json_body()
    result = await group_service.create_group(
        get_store(),
        g.token,
        user_id,
        group_id=body.get("groupId"),
        name=body.get("name"),
        description=body.get("description"),
    )
    return jsonify({"data": result, "warnings": []}), 201


@groups_bp.route("/<user_id>/groups/<group_id>", methods=["GET"])
@with_token
async def get_group(user_id: str, group_id: str):
    result = await group_service.get_group_details(get_store(), g.token, user_id, group_id)
    return jsonify({"data": result, "warnings": []}), 200


@groups_bp.route("/<user_id>/groups/<group_id>", methods=["PATCH"])
@with_token
async def edit_group(user_id: str, group_id: str):
    """PATCH /users/:uid/groups/:gid — Empty values keep the current ones."""
    body = json_body()
    result = await group_service.edit_group(
        get_store(),
        g.token,
        user_id,
        group_id,
        name=body.get("name"),
        description=body.get("description"),
    )
    return jsonify({"data": result, "warnings": []}), 200


@groups_bp.route("/<user_id>/groups/<group_id>", methods=["DELETE"])
@with_token
async def delete_group(user_id: str, group_id: str):
    result = await group_service.delete_group(get_store(), g.token, user_id, group_id)
    return jsonify({"data": result, "warnings": []}), 200


@groups_bp.route("/<user_id>/groups/<group_id>/games", methods=["POST"])
@with_token
async def add_game(user_id: str, group_id: str):
    """POST /users/:uid/groups/:gid/games — Body: {"gameId": <catalog id>}."""
    result = await group_service.add_game_to_group(
        get_store(),
        get_catalog(),
        g.token,
        user_id,
        group_id,
        game_id=json_body().get("gameId"),
    )
    return jsonify({"data": result, "warnings": []}), 201


@groups_bp.route("/<user_id>/groups/<group_id>/games/<game_id>", methods=["DELETE"])
@with_token
async def remove_game(user_id: str, group_id: str, game_id: str):
    result = await group_service.remove_game_from_group(
        get_store(),
        g.token,
        user_id,
        group_id,
        game_id,
    )
    return jsonify({"data": result, "warnings": []}), 200
