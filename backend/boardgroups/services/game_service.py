"""
services/game_service.py — Catalog-side game lookups.

Thin layer over the CatalogClient: validates the query, then asks the
catalog. Nothing here touches the Collection Store.
"""

from __future__ import annotations

from backend.boardgroups.clients.base import CatalogClient
from backend.boardgroups.schemas.game_schema import SearchGamesSchema
from backend.boardgroups.schemas.validation import load_or_raise


async def search_games(
        catalog: CatalogClient,
        name: str | None,
        limit: str | int | None = None,
        order_by: str | None = None,
) -> list[dict]:
    """
    Raises:
      AppError(BAD_REQUEST)  — missing name, bad limit or order_by
      AppError(NOT_FOUND)    — no game matches
      AppError(EXT_SVC_FAIL) — catalog unreachable

    Returns: list of full game records.
    """
    data = load_or_raise(SearchGamesSchema(), {"name": name, "limit": limit, "order_by": order_by})
    games = await catalog.search_by_name(data["name"].strip(), data["limit"], data["order_by"])
    return [game.to_dict() for game in games]


async def list_catalog_popular(catalog: CatalogClient, limit: int = 20) -> list[dict]:
    """The catalog's own ranking ("most popular in the world")."""
    games = await catalog.list_popular(limit)
    return [game.to_dict() for game in games]
