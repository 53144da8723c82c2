"""
extensions.py — Per-app service singletons.

The Collection Store and the catalog client are attached to the Flask app
in the factory and looked up per request, never created at import time.

Pattern:
    1. The factory builds (or receives) a store and a catalog client.
    2. init_app(app, store, catalog) attaches them to app.extensions.
    3. Routes call get_store() / get_catalog() and pass the result to a
       service as a plain argument.

    from backend.boardgroups.extensions import get_catalog, get_store

Services never import this module: they receive the store and the catalog
as arguments, so unit tests need no Flask application.
"""

from __future__ import annotations

from flask import Flask, current_app

from backend.boardgroups.clients.base import CatalogClient
from backend.boardgroups.stores.base import CollectionStore

STORE_KEY = "boardgroups.store"
CATALOG_KEY = "boardgroups.catalog"


def init_app(app: Flask, store: CollectionStore, catalog: CatalogClient) -> None:
    app.extensions[STORE_KEY] = store
    app.extensions[CATALOG_KEY] = catalog


def get_store() -> CollectionStore:
    return current_app.extensions[STORE_KEY]


def get_catalog() -> CatalogClient:
    return current_app.extensions[CATALOG_KEY]
