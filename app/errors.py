"""
Application Exceptions.

Two error kinds cover the backend boundary: ``AuthError`` for identity and
session operations, ``RecordError`` for table operations.  Both carry the
backend's message verbatim; the original exception is kept on
``original_error`` for logging.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

# PostgREST code returned by ``.single()`` when zero rows match.
POSTGREST_NO_ROWS: str = "PGRST116"


class ConfigurationError(Exception):
    """Raised at startup when required configuration is missing."""


class AuthError(Exception):
    """Identity / session operation failure."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        self.message: str = message
        self.original_error: Optional[Exception] = original_error
        super().__init__(self.message)


class RecordErrorCode(StrEnum):
    """Classification of table-operation failures."""

    NOT_FOUND = "not_found"
    BACKEND = "backend"


class RecordError(Exception):
    """Table operation failure."""

    def __init__(
        self,
        message: str,
        code: RecordErrorCode = RecordErrorCode.BACKEND,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.message: str = message
        self.code: RecordErrorCode = code
        self.original_error: Optional[Exception] = original_error
        super().__init__(self.message)

    @property
    def is_not_found(self) -> bool:
        return self.code == RecordErrorCode.NOT_FOUND


def backend_message(exc: BaseException) -> str:
    """Return the backend's own message for *exc*.

    Supabase auth and PostgREST exceptions expose ``.message``; anything
    else falls back to ``str(exc)``.
    """
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or type(exc).__name__
