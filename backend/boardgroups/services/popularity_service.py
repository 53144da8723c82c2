"""
services/popularity_service.py — Cross-user game popularity.

A read-only view derived from the Collection Store at query time; nothing
is stored or memoised.

Counting rule: a game scores one point per *user* whose collection holds it.
The same game in two groups of one user still scores one.

Ordering: count descending; ties keep first-encountered order, i.e. the
traversal order users → groups → games (Python's sort is stable).

Reads for different users and groups are issued concurrently, then counted
sequentially in traversal order, so concurrency never changes the result.
Each read sees a consistent snapshot of what it reads; the scan as a whole is
best-effort. A user or group deleted mid-scan is skipped.

Cost is O(users × groups × games) per call, accepted for freshness given
small collections.
"""

from __future__ import annotations

import asyncio

from backend.boardgroups.errors import AppError, ErrorKind
from backend.boardgroups.models.game import PopularGame
from backend.boardgroups.stores.base import CollectionStore

POPULAR_GAMES_LIMIT = 20


async def _group_game_ids(store: CollectionStore, user_id: str, group_id: str) -> list[str]:
    try:
        group = await store.get_group_details(user_id, group_id)
    except AppError as exc:
        if exc.kind != ErrorKind.NOT_FOUND:
            raise
        return []
    return list(group.games)


async def _user_game_ids(store: CollectionStore, user_id: str) -> list[str]:
    """Distinct game ids across the user's groups, in traversal order."""
    try:
        groups = await store.list_user_groups(user_id)
    except AppError as exc:
        if exc.kind != ErrorKind.NOT_FOUND:
            raise
        return []

    per_group = await asyncio.gather(
        *(_group_game_ids(store, user_id, group_id) for group_id in groups)
    )
    return list(dict.fromkeys(game_id for game_ids in per_group for game_id in game_ids))


def rank_games(game_ids_per_user: list[list[str]], limit: int) -> list[tuple[str, int]]:
    """`(game id, user count)` pairs, most collected first, at most `limit`."""
    counts: dict[str, int] = {}
    for game_ids in game_ids_per_user:
        for game_id in game_ids:
            counts[game_id] = counts.get(game_id, 0) + 1
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]


async def get_popular_games(store: CollectionStore, limit: int = POPULAR_GAMES_LIMIT) -> list[PopularGame]:
    """
    Returns: at most `limit` PopularGame rows, most collected first, names
    taken from the global game table.
    """
    user_ids = await store.list_user_ids()
    game_ids_per_user = await asyncio.gather(
        *(_user_game_ids(store, user_id) for user_id in user_ids)
    )

    ranked = rank_games(list(game_ids_per_user), limit)
    games = await asyncio.gather(*(store.get_game(game_id) for game_id, _ in ranked))

    return [
        PopularGame(id=game.id, name=game.name, count=count)
        for game, (_, count) in zip(games, ranked)
    ]
