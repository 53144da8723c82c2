"""
errors.py — AppError base class and error kind registry.

Every error leaving a store, a service or the catalog client must be an
AppError carrying one of the kinds defined here. Do not raise strings or
generic exceptions from store, service or route code.

Rules:
  - Error kinds are a contract with the HTTP layer. They do not change once
    published. Messages are human-readable prose and may be improved at any time.
  - `info` is a structured payload naming exactly which field/id caused the
    error, so the boundary can build a precise response without re-deriving
    context.
  - Transport exceptions from the remote store are wrapped as FAIL, never
    left raw.
"""

from __future__ import annotations


class ErrorKind:

    # ── Input Errors (400) ─────────────────────────────────────────────────
    # All violating fields are reported together in `info`.
    BAD_REQUEST     = "BAD_REQUEST"

    # ── Auth Errors (401) ──────────────────────────────────────────────────
    # Missing token, or token resolving to another user than the claimed one.
    UNAUTHENTICATED = "UNAUTHENTICATED"

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    NOT_FOUND       = "NOT_FOUND"

    # ── Conflict Errors (409) ──────────────────────────────────────────────
    ALREADY_EXISTS  = "ALREADY_EXISTS"

    # ── Upstream Errors (502) ──────────────────────────────────────────────
    # Catalog or remote store unreachable, or answered with a 5xx.
    EXT_SVC_FAIL    = "EXT_SVC_FAIL"

    # ── System Errors (500) ────────────────────────────────────────────────
    FAIL            = "FAIL"


HTTP_STATUS_BY_KIND: dict[str, int] = {
    ErrorKind.BAD_REQUEST:     400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.NOT_FOUND:       404,
    ErrorKind.ALREADY_EXISTS:  409,
    ErrorKind.EXT_SVC_FAIL:    502,
    ErrorKind.FAIL:            500,
}

_DEFAULT_MESSAGES: dict[str, str] = {
    ErrorKind.BAD_REQUEST:     "The request is bad.",
    ErrorKind.UNAUTHENTICATED: "Authentication failed.",
    ErrorKind.NOT_FOUND:       "The item does not exist.",
    ErrorKind.ALREADY_EXISTS:  "The item already exists.",
    ErrorKind.EXT_SVC_FAIL:    "External service failure.",
    ErrorKind.FAIL:            "An error occurred.",
}


class AppError(Exception):

    def __init__(
            self,
            kind: str,
            message: str | None = None,
            info: dict | None = None,
    ) -> None:
        message = message or _DEFAULT_MESSAGES.get(kind, "An error occurred.")
        super().__init__(message)
        self.kind    = kind
        self.message = message
        self.info    = info if info is not None else {}

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND.get(self.kind, 500)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code":    self.kind,
                "message": self.message,
                "info":    self.info,
            }
        }

    def __repr__(self) -> str:
        return (
            f"AppError(kind={self.kind!r}, "
            f"message={self.message!r}, "
            f"info={self.info!r})"
        )

    # ── Factories ──────────────────────────────────────────────────────────

    @classmethod
    def bad_request(cls, info: dict) -> "AppError":
        return cls(ErrorKind.BAD_REQUEST, info=info)

    @classmethod
    def unauthenticated(cls, reason: str) -> "AppError":
        return cls(ErrorKind.UNAUTHENTICATED, f"Unauthenticated: {reason}.", {"token": reason})

    @classmethod
    def not_found(cls, **info) -> "AppError":
        return cls(ErrorKind.NOT_FOUND, info=info)

    @classmethod
    def already_exists(cls, **info) -> "AppError":
        return cls(ErrorKind.ALREADY_EXISTS, info=info)

    @classmethod
    def ext_svc_fail(cls, **info) -> "AppError":
        return cls(ErrorKind.EXT_SVC_FAIL, info=info)

    @classmethod
    def fail(cls, **info) -> "AppError":
        return cls(ErrorKind.FAIL, info=info)
