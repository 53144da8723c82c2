"""
stores/document_store.py — Collection Store backed by a remote document store.

Talks to an Elasticsearch-compatible REST API over httpx. Each logical table
is its own collection (index); per-user and per-group sub-collections are
named by concatenation so that deleting a whole sub-collection removes every
document in it with one call:

  <prefix>_tokens                                   token    → {userId}
  <prefix>_games                                    game id  → full GameRecord
  <prefix>_users                                    user id  → {userName, credentialHash}
  <prefix>_users_<userId>_groups                    group id → {name, description}
  <prefix>_users_<userId>_groups_<groupId>_games    game id  → {name}

Consistency:
  Every write is sent with refresh=wait_for, so it is not acknowledged until
  it is visible to subsequent reads (read-your-writes). Ordering is per
  document only; nothing spans collections atomically.

Error translation (callers only ever see AppError):
  httpx transport exception   → FAIL
  remote 5xx                  → EXT_SVC_FAIL
  remote 4xx on a lookup      → NOT_FOUND
  missing index on a search   → empty result
  anything else unexpected    → FAIL

One short-lived httpx.AsyncClient is opened per public operation. Flask runs
each async view in its own event loop, and a pooled client must not outlive
the loop that created it.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from functools import partial
from typing import AsyncIterator
from urllib.parse import quote

import httpx

from backend.boardgroups.errors import AppError, ErrorKind
from backend.boardgroups.models.game import GameRecord
from backend.boardgroups.models.group import Group, GroupInfo, normalize_group_id
from backend.boardgroups.models.token import Token, new_token
from backend.boardgroups.models.user import User, UserInfo, normalize_user_id
from backend.boardgroups.stores.base import CollectionStore

logger = logging.getLogger(__name__)

_WAIT_FOR_REFRESH = {"refresh": "wait_for"}


class DocumentStore(CollectionStore):

    def __init__(
            self,
            base_url: str,
            index_prefix: str,
            timeout: float = 10.0,
            search_size: int = 10000,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url    = base_url.rstrip("/")
        self._prefix      = index_prefix
        self._timeout     = timeout
        self._search_size = search_size
        self._transport   = transport

    # ── Collection names ───────────────────────────────────────────────────

    @property
    def tokens_index(self) -> str:
        return f"{self._prefix}_tokens"

    @property
    def games_index(self) -> str:
        return f"{self._prefix}_games"

    @property
    def users_index(self) -> str:
        return f"{self._prefix}_users"

    def groups_index(self, user_id: str) -> str:
        return f"{self.users_index}_{user_id}_groups"

    def group_games_index(self, user_id: str, group_id: str) -> str:
        return f"{self.groups_index(user_id)}_{group_id}_games"

    # ── Transport ──────────────────────────────────────────────────────────

    @contextlib.asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
        ) as client:
            yield client

    async def _send(
            self,
            client: httpx.AsyncClient,
            method: str,
            path: str,
            params: dict | None = None,
            json: dict | None = None,
    ) -> httpx.Response:
        """Performs one request; wraps transport errors and 5xx answers."""
        try:
            response = await client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            logger.error("Document store %s %s failed: %s", method, path, exc)
            raise AppError.fail(method=method, path=path, reason=str(exc)) from exc

        if response.status_code >= 500:
            logger.error(
                "Document store %s %s answered %d: %s",
                method, path, response.status_code, response.text,
            )
            raise AppError.ext_svc_fail(method=method, path=path, status=response.status_code)
        return response

    @staticmethod
    def _unexpected(response: httpx.Response) -> AppError:
        try:
            detail = response.json().get("error")
        except ValueError:
            detail = response.text
        logger.error(
            "Document store %s %s answered unexpected %d: %s",
            response.request.method, response.request.url.path, response.status_code, detail,
        )
        return AppError.fail(
            path=response.request.url.path,
            status=response.status_code,
            reason=detail,
        )

    @staticmethod
    def _doc_path(index: str, doc_id: str, endpoint: str = "_doc") -> str:
        return f"/{index}/{endpoint}/{quote(doc_id, safe='')}"

    # ── Document primitives ────────────────────────────────────────────────

    async def _get_doc(self, client: httpx.AsyncClient, index: str, doc_id: str) -> dict | None:
        """Returns the document source, or None on any 4xx (missing doc or index)."""
        response = await self._send(client, "GET", self._doc_path(index, doc_id))
        if response.status_code == 200:
            return response.json()["_source"]
        if 400 <= response.status_code < 500:
            return None
        raise self._unexpected(response)

    async def _put_doc(self, client: httpx.AsyncClient, index: str, doc_id: str, body: dict) -> None:
        """Create-or-replace (last write wins)."""
        response = await self._send(
            client, "PUT", self._doc_path(index, doc_id),
            params=_WAIT_FOR_REFRESH, json=body,
        )
        if response.status_code not in (200, 201):
            raise self._unexpected(response)

    async def _create_doc(self, client: httpx.AsyncClient, index: str, doc_id: str, body: dict) -> bool:
        """Create-only. False when a document with that id already exists."""
        response = await self._send(
            client, "PUT", self._doc_path(index, doc_id, "_create"),
            params=_WAIT_FOR_REFRESH, json=body,
        )
        if response.status_code == 201:
            return True
        if response.status_code == 409:
            return False
        raise self._unexpected(response)

    async def _delete_doc(self, client: httpx.AsyncClient, index: str, doc_id: str) -> bool:
        """False when there was nothing to delete."""
        response = await self._send(
            client, "DELETE", self._doc_path(index, doc_id),
            params=_WAIT_FOR_REFRESH,
        )
        if response.status_code == 200:
            return True
        if response.status_code == 404:
            return False
        raise self._unexpected(response)

    async def _search(
            self,
            client: httpx.AsyncClient,
            index: str,
            query: dict | None = None,
            size: int | None = None,
    ) -> list[tuple[str, dict]]:
        """`(id, source)` pairs in index order (`_doc`). Missing index → []."""
        body: dict = {"size": size or self._search_size, "sort": ["_doc"]}
        if query is not None:
            body["query"] = query
        response = await self._send(client, "POST", f"/{index}/_search", json=body)
        if response.status_code == 200:
            return [(hit["_id"], hit["_source"]) for hit in response.json()["hits"]["hits"]]
        if response.status_code == 404:
            return []
        raise self._unexpected(response)

    async def _delete_index(self, client: httpx.AsyncClient, index: str) -> None:
        """Drops a whole collection. A collection that never existed is fine."""
        response = await self._send(client, "DELETE", f"/{index}")
        if response.status_code not in (200, 404):
            raise self._unexpected(response)

    async def _delete_tokens_of(self, client: httpx.AsyncClient, user_id: str) -> None:
        response = await self._send(
            client, "POST", f"/{self.tokens_index}/_delete_by_query",
            params={"refresh": "true"},
            json={"query": {"term": {"userId.keyword": user_id}}},
        )
        if response.status_code not in (200, 404):
            raise self._unexpected(response)

    # ── Lookups shared by several operations ───────────────────────────────

    async def _require_user(self, client: httpx.AsyncClient, user_id: str) -> dict:
        source = await self._get_doc(client, self.users_index, user_id)
        if source is None:
            raise AppError.not_found(userId=user_id)
        return source

    async def _require_group(self, client: httpx.AsyncClient, user_id: str, group_id: str) -> dict:
        await self._require_user(client, user_id)
        source = await self._get_doc(client, self.groups_index(user_id), group_id)
        if source is None:
            raise AppError.not_found(userId=user_id, groupId=group_id)
        return source

    async def _group_games(self, client: httpx.AsyncClient, user_id: str, group_id: str) -> dict[str, str]:
        hits = await self._search(client, self.group_games_index(user_id, group_id))
        return {game_id: source["name"] for game_id, source in hits}

    async def _put_token(self, client: httpx.AsyncClient, user_id: str) -> str:
        record = Token(token=new_token(), user_id=user_id)
        await self._put_doc(client, self.tokens_index, record.token, record.to_dict())
        return record.token

    # ── Users ──────────────────────────────────────────────────────────────

    async def create_user(
            self,
            user_id: str,
            name: str,
            credential_hash: str | None = None,
    ) -> UserInfo:
        user_id = normalize_user_id(user_id)
        async with self._session() as client:
            created = await self._create_doc(
                client, self.users_index, user_id,
                {"userName": name, "credentialHash": credential_hash},
            )
            if not created:
                raise AppError.already_exists(userId=user_id)
            try:
                token = await self._put_token(client, user_id)
            except AppError as exc:
                # Never leave a user behind without a token.
                logger.error("Token write for new user %s failed (%s); removing user", user_id, exc.kind)
                await self._delete_doc(client, self.users_index, user_id)
                raise

        logger.info("Created user %s", user_id)
        return UserInfo(id=user_id, name=name, token=token)

    async def get_user(self, user_id: str) -> User:
        user_id = normalize_user_id(user_id)
        async with self._session() as client:
            source = await self._require_user(client, user_id)
            hits = await self._search(client, self.groups_index(user_id))
            games = await asyncio.gather(
                *(self._group_games(client, user_id, group_id) for group_id, _ in hits)
            )

        groups = {
            group_id: Group(
                id=group_id,
                name=group_source["name"],
                description=group_source.get("description", ""),
                games=group_games,
            )
            for (group_id, group_source), group_games in zip(hits, games)
        }
        return User(
            id=user_id,
            display_name=source["userName"],
            credential_hash=source.get("credentialHash"),
            groups=groups,
        )

    async def list_user_ids(self) -> list[str]:
        async with self._session() as client:
            hits = await self._search(client, self.users_index)
        return [user_id for user_id, _ in hits]

    async def delete_user(self, user_id: str) -> UserInfo:
        """
        Cascades children first and the user document last, so an interrupted
        delete leaves the user reachable and the same call can be re-issued to
        finish the job. Nothing is retried automatically: the failure is
        raised as FAIL with the collections still pending in `info`.
        """
        user_id = normalize_user_id(user_id)
        async with self._session() as client:
            source = await self._require_user(client, user_id)
            group_hits = await self._search(client, self.groups_index(user_id))

            steps = [
                (index, partial(self._delete_index, client, index))
                for index in [
                    *(self.group_games_index(user_id, group_id) for group_id, _ in group_hits),
                    self.groups_index(user_id),
                ]
            ]
            steps.append((self.tokens_index, partial(self._delete_tokens_of, client, user_id)))
            steps.append((self.users_index, partial(self._delete_doc, client, self.users_index, user_id)))

            for position, (label, step) in enumerate(steps):
                try:
                    await step()
                except AppError as exc:
                    pending = [pending_label for pending_label, _ in steps[position:]]
                    logger.error(
                        "Deleting user %s stopped at %s (%s); still pending: %s",
                        user_id, label, exc.kind, pending,
                    )
                    raise AppError(
                        ErrorKind.FAIL,
                        "User deletion was interrupted; re-issue the delete to finish it.",
                        {"userId": user_id, "pending": pending, "cause": exc.kind},
                    ) from exc

        logger.info("Deleted user %s with %d group(s)", user_id, len(group_hits))
        return UserInfo(id=user_id, name=source["userName"])

    # ── Groups ─────────────────────────────────────────────────────────────

    async def create_group(
            self,
            user_id: str,
            group_id: str,
            name: str,
            description: str,
    ) -> GroupInfo:
        user_id, group_id = normalize_user_id(user_id), normalize_group_id(group_id)
        async with self._session() as client:
            await self._require_user(client, user_id)
            created = await self._create_doc(
                client, self.groups_index(user_id), group_id,
                {"name": name, "description": description},
            )
        if not created:
            raise AppError.already_exists(userId=user_id, groupId=group_id)
        return GroupInfo(id=group_id, name=name, description=description)

    async def edit_group(
            self,
            user_id: str,
            group_id: str,
            name: str | None = None,
            description: str | None = None,
    ) -> GroupInfo:
        user_id, group_id = normalize_user_id(user_id), normalize_group_id(group_id)
        async with self._session() as client:
            source = await self._require_group(client, user_id, group_id)
            group = Group(id=group_id, name=source["name"], description=source.get("description", ""))
            info = group.edit(name, description)
            # name and description share one document, so this write is atomic.
            await self._put_doc(
                client, self.groups_index(user_id), group_id,
                {"name": info.name, "description": info.description},
            )
        return info

    async def list_user_groups(self, user_id: str) -> dict[str, dict]:
        user_id = normalize_user_id(user_id)
        async with self._session() as client:
            await self._require_user(client, user_id)
            hits = await self._search(client, self.groups_index(user_id))
        return {
            group_id: {"name": source["name"], "description": source.get("description", "")}
            for group_id, source in hits
        }

    async def delete_group(self, user_id: str, group_id: str) -> GroupInfo:
        user_id, group_id = normalize_user_id(user_id), normalize_group_id(group_id)
        async with self._session() as client:
            source = await self._require_group(client, user_id, group_id)
            # Games first: the group stays addressable until its collection is gone.
            await self._delete_index(client, self.group_games_index(user_id, group_id))
            if not await self._delete_doc(client, self.groups_index(user_id), group_id):
                raise AppError.not_found(userId=user_id, groupId=group_id)
        return GroupInfo(id=group_id, name=source["name"], description=source.get("description", ""))

    async def get_group_details(self, user_id: str, group_id: str) -> Group:
        user_id, group_id = normalize_user_id(user_id), normalize_group_id(group_id)
        async with self._session() as client:
            source = await self._require_group(client, user_id, group_id)
            games = await self._group_games(client, user_id, group_id)
        return Group(
            id=group_id,
            name=source["name"],
            description=source.get("description", ""),
            games=games,
        )

    # ── Games ──────────────────────────────────────────────────────────────

    async def add_game_to_group(
            self,
            user_id: str,
            group_id: str,
            game: GameRecord,
    ) -> GameRecord:
        user_id, group_id = normalize_user_id(user_id), normalize_group_id(group_id)
        async with self._session() as client:
            await self._require_group(client, user_id, group_id)
            await self._put_doc(client, self.games_index, game.id, game.to_dict())
            await self._put_doc(
                client, self.group_games_index(user_id, group_id), game.id,
                {"name": game.name},
            )
        return game

    async def remove_game_from_group(
            self,
            user_id: str,
            group_id: str,
            game_id: str,
    ) -> GameRecord:
        user_id, group_id = normalize_user_id(user_id), normalize_group_id(group_id)
        async with self._session() as client:
            await self._require_group(client, user_id, group_id)
            removed = await self._delete_doc(client, self.group_games_index(user_id, group_id), game_id)
            if not removed:
                raise AppError.not_found(gameId=game_id, groupId=group_id)
            return await self._require_game(client, game_id)

    async def get_game(self, game_id: str) -> GameRecord:
        async with self._session() as client:
            return await self._require_game(client, game_id)

    async def _require_game(self, client: httpx.AsyncClient, game_id: str) -> GameRecord:
        source = await self._get_doc(client, self.games_index, game_id)
        if source is None:
            raise AppError.not_found(gameId=game_id)
        return GameRecord.from_dict(source)

    # ── Tokens ─────────────────────────────────────────────────────────────

    async def create_token(self, user_id: str) -> str:
        async with self._session() as client:
            return await self._put_token(client, normalize_user_id(user_id))

    async def token_to_user_id(self, token: str) -> str | None:
        async with self._session() as client:
            source = await self._get_doc(client, self.tokens_index, token)
        return source["userId"] if source else None

    async def get_user_token(self, user_id: str) -> str:
        user_id = normalize_user_id(user_id)
        async with self._session() as client:
            hits = await self._search(
                client, self.tokens_index,
                query={"term": {"userId.keyword": user_id}},
                size=1,
            )
        if not hits:
            raise AppError(ErrorKind.NOT_FOUND, "The user holds no token.", {"userId": user_id})
        return hits[0][0]
