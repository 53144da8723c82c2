import os
from pathlib import Path

from dotenv import load_dotenv


_BACKEND_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _BACKEND_DIR.parent

# Root .env is canonical; backend/.env is a fallback.
load_dotenv(_PROJECT_ROOT / ".env")
load_dotenv(_BACKEND_DIR / ".env")

_DEFAULT_SECRET = "change-me-in-production"


def _first_non_empty_env(*names: str, default: str) -> str:
    """Returns the first non-empty env var value from `names`, else `default`."""
    for name in names:
        value = os.getenv(name)
        if value is not None and value != "":
            return value
    return default


def _parse_int_env(*names: str, default: int) -> int:
    """Parses the first non-empty env var in `names` as int, else returns `default`."""
    raw = _first_non_empty_env(*names, default=str(default))
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _parse_float_env(*names: str, default: float) -> float:
    raw = _first_non_empty_env(*names, default=str(default))
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


class BaseConfig:

    SECRET_KEY: str = _first_non_empty_env("SECRET_KEY", default=_DEFAULT_SECRET)

    JSON_SORT_KEYS: bool = False
    LOG_LEVEL: str = _first_non_empty_env("LOG_LEVEL", default="INFO").upper()

    # "memory" (transient, per process) or "document" (Elasticsearch-compatible).
    STORE_BACKEND: str = _first_non_empty_env("STORE_BACKEND", default="memory")

    DOCSTORE_URL: str = _first_non_empty_env("DOCSTORE_URL", "ELASTIC_URL", default="")
    DOCSTORE_INDEX_PREFIX: str = _first_non_empty_env("DOCSTORE_INDEX_PREFIX", default="boardgroups")
    DOCSTORE_TIMEOUT: float = _parse_float_env("DOCSTORE_TIMEOUT", default=10.0)
    DOCSTORE_SEARCH_SIZE: int = _parse_int_env("DOCSTORE_SEARCH_SIZE", default=10000)

    ATLAS_BASE_URL: str = _first_non_empty_env(
        "ATLAS_BASE_URL",
        default="https://api.boardgameatlas.com/api",
    )
    ATLAS_CLIENT_ID: str = _first_non_empty_env("ATLAS_CLIENT_ID", default="")
    ATLAS_TIMEOUT: float = _parse_float_env("ATLAS_TIMEOUT", default=10.0)

    POPULAR_GAMES_LIMIT: int = _parse_int_env("POPULAR_GAMES_LIMIT", default=20)
    BCRYPT_LOG_ROUNDS: int = 12

    # Guest account seeded into the memory store. Empty id or token: no guest.
    GUEST_USER_ID: str = _first_non_empty_env("GUEST_USER_ID", default="guest")
    GUEST_USER_NAME: str = _first_non_empty_env("GUEST_USER_NAME", default="Guest")
    GUEST_TOKEN: str = _first_non_empty_env("GUEST_TOKEN", default="")


class DevelopmentConfig(BaseConfig):
    DEBUG:   bool = True
    TESTING: bool = False
    LOG_LEVEL: str = _first_non_empty_env("LOG_LEVEL", default="DEBUG").upper()


class TestingConfig(BaseConfig):

    DEBUG:   bool = True
    TESTING: bool = True

    # Tests never reach a remote store unless they inject one.
    STORE_BACKEND: str = "memory"
    GUEST_TOKEN: str = ""

    BCRYPT_LOG_ROUNDS: int = 4


class ProductionConfig(BaseConfig):

    DEBUG:   bool = False
    TESTING: bool = False
    STORE_BACKEND: str = _first_non_empty_env("STORE_BACKEND", default="document")


def validate_production_config(app) -> None:
    """
    Fail-fast guard for production configuration.

    Must be called in the app factory immediately after
    app.config.from_object(ProductionConfig):

        app.config.from_object(ProductionConfig)
        validate_production_config(app)   # raises ValueError if misconfigured

    Raises ValueError if any required production value is missing or insecure.
    """
    if app.config.get("SECRET_KEY") == _DEFAULT_SECRET:
        raise ValueError(
            "SECRET_KEY must be set to a strong random value in production. "
            "Do not use the default placeholder."
        )
    if app.config.get("STORE_BACKEND") == "document" and not app.config.get("DOCSTORE_URL"):
        raise ValueError(
            "DOCSTORE_URL environment variable is required when STORE_BACKEND is 'document'. "
            "Set it to the base URL of the Elasticsearch-compatible server."
        )
    if not app.config.get("ATLAS_CLIENT_ID"):
        raise ValueError(
            "ATLAS_CLIENT_ID environment variable is required in production."
        )


# ── Config selector ────────────────────────────────────────────────────────
#
# Used by the app factory:
#   from backend.config import config_by_name
#   app.config.from_object(config_by_name[flask_env])
# ──────────────────────────────────────────────────────────────────────────

config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing":     TestingConfig,
    "production":  ProductionConfig,
}
