"""
routes/games.py — Game route handlers. No authentication required.

Endpoints (base url_prefix=/api/v1/games):
  GET /games/popular                       → 200  most collected across all users
  GET /games/catalog/popular               → 200  the catalog's own ranking
  GET /games/search?name=&limit=&order_by= → 200  catalog search
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from backend.boardgroups.extensions import get_catalog, get_store
from backend.boardgroups.services import game_service, popularity_service

games_bp = Blueprint("games", __name__)


@games_bp.route("/popular", methods=["GET"])
async def popular_games():
    """GET /games/popular — [{id, name, count}], count = users holding the game."""
    games = await popularity_service.get_popular_games(
        get_store(),
        limit=current_app.config["POPULAR_GAMES_LIMIT"],
    )
    result = [game.to_dict() for game in games]
    return jsonify({"data": result, "warnings": []}), 200


@games_bp.route("/catalog/popular", methods=["GET"])
async def catalog_popular_games():
    result = await game_service.list_catalog_popular(
        get_catalog(),
        limit=current_app.config["POPULAR_GAMES_LIMIT"],
    )
    return jsonify({"data": result, "warnings": []}), 200


@games_bp.route("/search", methods=["GET"])
async def search_games():
    result = await game_service.search_games(
        get_catalog(),
        name=request.args.get("name"),
        limit=request.args.get("limit"),
        order_by=request.args.get("order_by"),
    )
    return jsonify({"data": result, "warnings": []}), 200
