"""
boardgroups/__init__.py — Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time — this enables:
           - Multiple isolated test app instances, each with its own store
           - Clean separation between app creation and app startup

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Build the Collection Store and the catalog client (or accept injected
     ones) and attach them via extensions.init_app()
  3. Register all route blueprints under /api/v1
  4. Register global error handlers (AppError → JSON, Exception → 500)
  5. Set the package log level from LOG_LEVEL

Views are async coroutines; Flask runs each on its own event loop, which is
why the document store and the catalog client open their HTTP session per
operation instead of holding one for the app's lifetime.
"""

from __future__ import annotations

import logging
import traceback

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from backend.boardgroups.clients.base import CatalogClient
from backend.boardgroups.stores.base import CollectionStore
from backend.config import config_by_name, validate_production_config


# ── Application factory ────────────────────────────────────────────────────

def create_app(
        config_name: str = "development",
        store: CollectionStore | None = None,
        catalog: CatalogClient | None = None,
) -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Resolved via config_by_name in config.py.
        store:       Collection Store to use instead of the configured one.
        catalog:     Catalog client to use instead of Board Game Atlas.

    Returns:
        A fully configured Flask app ready to serve requests.
    """
    app = Flask(__name__)

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    logging.getLogger("backend.boardgroups").setLevel(app.config["LOG_LEVEL"])

    # ── Store and catalog ──────────────────────────────────────────────────
    # Import here (not at module top) to avoid circular imports.
    from backend.boardgroups import extensions
    from backend.boardgroups.clients.board_game_atlas import BoardGameAtlasClient
    from backend.boardgroups.stores.factory import build_store

    if store is None:
        store = build_store(app.config)
    if catalog is None:
        catalog = BoardGameAtlasClient(
            client_id=app.config["ATLAS_CLIENT_ID"],
            base_url=app.config["ATLAS_BASE_URL"],
            timeout=app.config["ATLAS_TIMEOUT"],
        )
    extensions.init_app(app, store, catalog)

    # ── Blueprints ─────────────────────────────────────────────────────────
    _register_blueprints(app)

    # ── Error handlers ─────────────────────────────────────────────────────
    _register_error_handlers(app)
    _register_cors(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints under the /api/v1 prefix.

    users_bp and groups_bp share /api/v1/users: groups are always addressed
    through their owner (/users/<uid>/groups/...).
    """
    from backend.boardgroups.routes.games import games_bp
    from backend.boardgroups.routes.groups import groups_bp
    from backend.boardgroups.routes.users import users_bp

    app.register_blueprint(users_bp,  url_prefix="/api/v1/users")
    app.register_blueprint(groups_bp, url_prefix="/api/v1/users")
    app.register_blueprint(games_bp,  url_prefix="/api/v1/games")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

    Handlers:
      AppError      → {"error": {"code", "message", "info"}} with the kind's status
      HTTPException → passed through (unknown route 404, wrong method 405)
      Exception     → generic FAIL (500); full traceback logged

    Stack traces never leave the server.
    """
    from backend.boardgroups.errors import AppError, ErrorKind

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """
        Converts an AppError raised anywhere in the request lifecycle
        (middleware, service, store, catalog client) into the error envelope.

        Routes never catch AppError — they let it propagate here.
        """
        if error.http_status >= 500:
            app.logger.error("%s %s failed: %r", request.method, request.path, error)
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        return error

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """
        Catches all unhandled exceptions and returns a generic 500 response.

        The full traceback is logged to the application logger. It is never
        part of the response body.
        """
        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify(AppError(
            ErrorKind.FAIL,
            "An unexpected error occurred. Please try again later.",
        ).to_dict()), 500


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for browser-based local development.

    Enabled when DEBUG or TESTING is true so a frontend served from another
    local port can call the API with Authorization headers.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allow_all = bool(app.config.get("DEBUG") or app.config.get("TESTING"))

        if allow_all:
            response.headers["Access-Control-Allow-Origin"] = origin if origin else "*"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"

        return response
