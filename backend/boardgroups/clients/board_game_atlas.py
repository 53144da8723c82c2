"""
clients/board_game_atlas.py — Board Game Atlas catalog client.

Endpoints used (all GET, all take ?client_id=):
  /search                  games by name, by ids, or ordered by rank
  /game/mechanics          mechanic id → name
  /game/categories         category id → name

Search results only carry mechanic/category ids; they are resolved to names
with the two lookup lists, fetched once per client instance.

Status mapping:
  network error, 5xx  → EXT_SVC_FAIL
  4xx                 → NOT_FOUND
  other non-2xx       → FAIL
"""

from __future__ import annotations

import logging

import httpx

from backend.boardgroups.clients.base import CatalogClient
from backend.boardgroups.errors import AppError
from backend.boardgroups.models.game import GameRecord

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.boardgameatlas.com/api"


class BoardGameAtlasClient(CatalogClient):

    def __init__(
            self,
            client_id: str,
            base_url: str = DEFAULT_BASE_URL,
            timeout: float = 10.0,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id  = client_id
        self._base_url   = base_url.rstrip("/")
        self._timeout    = timeout
        self._transport  = transport
        self._mechanics:  dict[str, str] | None = None
        self._categories: dict[str, str] | None = None

    # ── Transport ──────────────────────────────────────────────────────────

    async def _fetch(self, path: str, **params) -> dict:
        query = {"client_id": self._client_id}
        query.update({key: value for key, value in params.items() if value is not None})

        try:
            async with httpx.AsyncClient(
                    base_url=self._base_url,
                    timeout=self._timeout,
                    transport=self._transport,
            ) as client:
                response = await client.get(path, params=query)
        except httpx.HTTPError as exc:
            logger.error("Catalog GET %s failed: %s", path, exc)
            raise AppError.ext_svc_fail(path=path, reason=str(exc)) from exc

        if response.is_success:
            return response.json()

        status_class = response.status_code // 100
        logger.warning("Catalog GET %s answered %d", path, response.status_code)
        if status_class == 5:
            raise AppError.ext_svc_fail(path=path, status=response.status_code)
        if status_class == 4:
            raise AppError.not_found(path=path)
        raise AppError.fail(path=path, status=response.status_code)

    async def _lookup(self, kind: str) -> dict[str, str]:
        """`id → name` for "mechanics" or "categories"."""
        payload = await self._fetch(f"/game/{kind}")
        return {entry["id"]: entry["name"] for entry in payload.get(kind, [])}

    async def _names(self) -> tuple[dict[str, str], dict[str, str]]:
        if self._mechanics is None:
            self._mechanics = await self._lookup("mechanics")
        if self._categories is None:
            self._categories = await self._lookup("categories")
        return self._mechanics, self._categories

    # ── Mapping ────────────────────────────────────────────────────────────

    async def _to_records(self, games: list[dict]) -> list[GameRecord]:
        if not games:
            return []
        mechanics, categories = await self._names()
        return [make_game_record(game, mechanics, categories) for game in games]

    async def _search(self, **params) -> list[GameRecord]:
        payload = await self._fetch("/search", **params)
        return await self._to_records(payload.get("games") or [])

    # ── CatalogClient ──────────────────────────────────────────────────────

    async def resolve_by_name(self, name: str) -> GameRecord:
        games = await self._search(name=name, limit=1, fuzzy_match="true")
        if not games:
            raise AppError.not_found(name=name)
        return games[0]

    async def resolve_by_id(self, game_id: str) -> GameRecord:
        games = await self._search(ids=game_id)
        if not games:
            raise AppError.not_found(gameId=game_id)
        return games[0]

    async def search_by_name(
            self,
            name: str,
            limit: int = 10,
            order_by: str | None = None,
    ) -> list[GameRecord]:
        games = await self._search(name=name, limit=limit, order_by=order_by, fuzzy_match="true")
        if not games:
            raise AppError.not_found(name=name)
        return games

    async def list_popular(self, limit: int = 20) -> list[GameRecord]:
        return await self._search(order_by="rank", limit=limit)


def make_game_record(
        game: dict,
        mechanics: dict[str, str],
        categories: dict[str, str],
) -> GameRecord:
    """Builds a GameRecord from one /search entry; unknown ids are dropped."""
    publisher = game.get("primary_publisher")
    if isinstance(publisher, dict):
        publisher = publisher.get("name")
    return GameRecord(
        id=game["id"],
        name=game["name"],
        description=game.get("description_preview") or game.get("description"),
        url=game.get("url"),
        image_url=game.get("image_url"),
        publisher=publisher or game.get("publisher"),
        amazon_rank=game.get("amazon_rank"),
        price=game.get("price"),
        mechanics=tuple(
            mechanics[entry["id"]] for entry in game.get("mechanics", []) if entry["id"] in mechanics
        ),
        categories=tuple(
            categories[entry["id"]] for entry in game.get("categories", []) if entry["id"] in categories
        ),
    )
