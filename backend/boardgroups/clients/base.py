"""
clients/base.py — External catalog contract.

The collection core never talks to the catalog directly; services resolve a
game through a CatalogClient and hand the resulting GameRecord to the store,
which keeps whatever it was given.

Every method is async and may raise:
  NOT_FOUND     — no game matches the name/id
  EXT_SVC_FAIL  — catalog unreachable or answered 5xx
  FAIL          — anything else unexpected
"""

from __future__ import annotations

import abc

from backend.boardgroups.models.game import GameRecord

ORDER_BY_CHOICES = (
    "rank",
    "popularity",
    "price",
    "discount",
    "name",
    "year_published",
    "average_user_rating",
)


class CatalogClient(abc.ABC):

    @abc.abstractmethod
    async def resolve_by_name(self, name: str) -> GameRecord:
        """Best match for `name`."""

    @abc.abstractmethod
    async def resolve_by_id(self, game_id: str) -> GameRecord:
        ...

    @abc.abstractmethod
    async def search_by_name(
            self,
            name: str,
            limit: int = 10,
            order_by: str | None = None,
    ) -> list[GameRecord]:
        """Every match for `name`, at most `limit`; NOT_FOUND when there is none."""

    @abc.abstractmethod
    async def list_popular(self, limit: int = 20) -> list[GameRecord]:
        """The catalog's own ranking, unrelated to what users collect."""
