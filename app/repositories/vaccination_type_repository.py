"""
Vaccination Type Repository.

Stateless translation between application calls and the
``vaccination_types`` table.  Every method is one backend call: no local
cache, no retry, no pagination.  Failures surface as ``RecordError`` with
the backend's message.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from app.database import DatabaseManager
from app.errors import RecordError, backend_message
from app.logger import StructuredLogger
from app.models.vaccination_type import VaccinationType
from app.realtime import ChangeCallback, ChangeSubscription
from app.repositories.base_repository import BaseRepository
from app.utils.string_helpers import contains_pattern


class VaccinationTypeRepository(BaseRepository):
    """Data access layer for VaccinationType records."""

    TABLE = "vaccination_types"
    SCHEMA = "public"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def list_all(self) -> list[VaccinationType]:
        """Fetch every record, newest first."""
        def _query() -> list[VaccinationType]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
            return [VaccinationType(**row) for row in response.data or []]

        return self._execute(_query, operation_name="list_all (vaccination_types)")

    def get_by_id(self, record_id: str) -> VaccinationType:
        """Fetch exactly one record.

        Raises:
            RecordError: ``NOT_FOUND`` when no row matches.
        """
        def _query() -> VaccinationType:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("id", record_id)
                .single()
                .execute()
            )
            return VaccinationType(**response.data)

        return self._execute(
            _query,
            operation_name="get_by_id (vaccination_types)",
            entity_id=record_id,
        )

    def create(self, title: str, description: str, created_by: str) -> VaccinationType:
        """Insert a record; id and timestamps are assigned by the backend."""
        def _query() -> VaccinationType:
            response = (
                self.supabase.table(self.TABLE)
                .insert({
                    "title": title,
                    "description": description,
                    "created_by": created_by,
                })
                .execute()
            )
            return VaccinationType(**response.data[0])

        created = self._execute(_query, operation_name="create (vaccination_types)")
        self._logger.info("Vaccination type created: %s", created.id)
        return created

    def update(self, record_id: str, description: str) -> VaccinationType:
        """Replace the description and bump ``updated_at``.

        The title is never part of this call.

        Raises:
            RecordError: ``NOT_FOUND`` when no row matches.
        """
        def _query() -> VaccinationType:
            response = (
                self.supabase.table(self.TABLE)
                .update({
                    "description": description,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })
                .eq("id", record_id)
                .execute()
            )
            if not response.data:
                raise self._not_found(record_id)
            return VaccinationType(**response.data[0])

        return self._execute(
            _query,
            operation_name="update (vaccination_types)",
            entity_id=record_id,
        )

    def delete(self, record_id: str) -> None:
        """Remove a record.

        Raises:
            RecordError: ``NOT_FOUND`` when nothing was deleted, e.g. on a
                second call for the same id.
        """
        def _query() -> None:
            response = (
                self.supabase.table(self.TABLE)
                .delete()
                .eq("id", record_id)
                .execute()
            )
            if not response.data:
                raise self._not_found(record_id)

        self._execute(
            _query,
            operation_name="delete (vaccination_types)",
            entity_id=record_id,
        )
        self._logger.info("Vaccination type deleted: %s", record_id)

    def search(self, query: str) -> list[VaccinationType]:
        """Case-insensitive substring match on ``title``, newest first.

        An empty *query* matches every record.
        """
        def _query() -> list[VaccinationType]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .ilike("title", contains_pattern(query))
                .order("created_at", desc=True)
                .execute()
            )
            return [VaccinationType(**row) for row in response.data or []]

        return self._execute(_query, operation_name="search (vaccination_types)")

    def subscribe_to_changes(
        self,
        callback: Optional[ChangeCallback] = None,
    ) -> ChangeSubscription:
        """Register for insert/update/delete notifications on the table.

        Returns a ``ChangeSubscription``; call ``unsubscribe()`` on it to
        stop delivery.
        """
        subscription = ChangeSubscription(
            table=self.TABLE,
            logger=self._logger,
            callback=callback,
        )
        try:
            realtime = self._db.realtime
            channel = realtime.subscribe(
                topic=self.TABLE,
                schema=self.SCHEMA,
                table=self.TABLE,
                callback=subscription.deliver,
                access_token=self._access_token(),
            )
        except Exception as exc:
            message = backend_message(exc)
            self._logger.error("Realtime subscription to %s failed: %s", self.TABLE, message)
            raise RecordError(message, original_error=exc) from exc

        subscription.attach(channel, realtime.remove_channel)
        self._logger.info("Subscribed to %s changes.", self.TABLE)
        return subscription

    def _access_token(self) -> Optional[str]:
        """Token of the signed-in user, so row-level security applies to the feed."""
        try:
            session = self.supabase.auth.get_session()
        except Exception as exc:
            self._logger.debug("No session token for realtime: %s", exc)
            return None
        return session.access_token if session is not None else None
