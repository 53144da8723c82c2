"""
stores/factory.py — Backend selection.

The Collection Store backend is picked once, when the application is built,
from the STORE_BACKEND config value. Everything downstream receives the
store instance and never branches on which backend it is.
"""

from __future__ import annotations

from typing import Mapping

from backend.boardgroups.stores.base import CollectionStore
from backend.boardgroups.stores.document_store import DocumentStore
from backend.boardgroups.stores.memory_store import MemoryStore, SeedUser

MEMORY_BACKEND = "memory"
DOCUMENT_BACKEND = "document"


def _seed_from_config(config: Mapping) -> list[SeedUser]:
    """The guest account, when fully configured, is the memory store's seed."""
    user_id = config.get("GUEST_USER_ID")
    token = config.get("GUEST_TOKEN")
    if not user_id or not token:
        return []
    return [SeedUser(user_id=user_id, name=config.get("GUEST_USER_NAME") or user_id, token=token)]


def build_store(config: Mapping) -> CollectionStore:
    """
    Builds the configured backend.

    Raises ValueError for an unknown STORE_BACKEND, or for the document
    backend without DOCSTORE_URL.
    """
    backend = (config.get("STORE_BACKEND") or MEMORY_BACKEND).lower()

    if backend == MEMORY_BACKEND:
        return MemoryStore(seed=_seed_from_config(config))

    if backend == DOCUMENT_BACKEND:
        if not config.get("DOCSTORE_URL"):
            raise ValueError("DOCSTORE_URL is required when STORE_BACKEND is 'document'.")
        return DocumentStore(
            base_url=config["DOCSTORE_URL"],
            index_prefix=config.get("DOCSTORE_INDEX_PREFIX", "boardgroups"),
            timeout=config.get("DOCSTORE_TIMEOUT", 10.0),
            search_size=config.get("DOCSTORE_SEARCH_SIZE", 10000),
        )

    raise ValueError(
        f"Unknown STORE_BACKEND {backend!r}; expected {MEMORY_BACKEND!r} or {DOCUMENT_BACKEND!r}."
    )
