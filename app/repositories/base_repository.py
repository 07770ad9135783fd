"""
Base Repository.

Provides shared infrastructure for all repositories:
- DatabaseManager reference (Supabase client)
- Logger reference
- Translation of backend failures into ``RecordError``
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from supabase import Client as SupabaseClient

from app.database import DatabaseManager
from app.errors import POSTGREST_NO_ROWS, RecordError, RecordErrorCode, backend_message
from app.logger import StructuredLogger

T = TypeVar("T")


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the Supabase client for backend operations."""
        return self._db.supabase

    def _execute(
        self,
        operation: Callable[[], T],
        *,
        operation_name: str,
        entity_id: Optional[str] = None,
    ) -> T:
        """Run a single backend call, converting failures to ``RecordError``.

        No retry and no fallback: the call either returns or raises.  A
        PostgREST "zero rows" response from ``.single()`` is classified as
        ``RecordErrorCode.NOT_FOUND``; every other failure keeps the
        backend's message verbatim under ``RecordErrorCode.BACKEND``.

        Parameters
        ----------
        operation:
            Zero-argument callable that performs the query and returns
            the normalised result.
        operation_name:
            Human-readable label for log messages, e.g.
            ``"get_by_id (vaccination_types)"``.
        entity_id:
            Primary key involved, if any, for log context.
        """
        try:
            return operation()
        except RecordError:
            raise
        except Exception as exc:
            message = backend_message(exc)
            code = (
                RecordErrorCode.NOT_FOUND
                if getattr(exc, "code", None) == POSTGREST_NO_ROWS
                else RecordErrorCode.BACKEND
            )
            self._logger.warning(
                "%s failed: %s",
                operation_name,
                message,
                extra={"table": self.TABLE, "entity_id": entity_id or "-", "code": str(code)},
            )
            raise RecordError(message, code=code, original_error=exc) from exc

    def _not_found(self, entity_id: str) -> RecordError:
        """Build the error raised when a keyed write touched no row."""
        return RecordError(
            f"No row in {self.TABLE} with id {entity_id}",
            code=RecordErrorCode.NOT_FOUND,
        )
