"""
User Repository.

Handles access to the ``users`` profile table.  The client only ever
creates a profile (at sign-up) and reads it back; profiles are never
updated or deleted here.
"""

from __future__ import annotations

from typing import Optional

from app.database import DatabaseManager
from app.logger import StructuredLogger
from app.models.enums import UserRole
from app.models.user import User
from app.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository):
    """Data access layer for User profiles."""

    TABLE = "users"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def get_by_id(self, user_id: str) -> User:
        """Fetch a profile by identity id.

        Raises:
            RecordError: ``NOT_FOUND`` when no profile row exists yet,
                otherwise the backend failure.
        """
        def _query() -> User:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("id", user_id)
                .single()
                .execute()
            )
            return User(**response.data)

        return self._execute(
            _query,
            operation_name="get_by_id (users)",
            entity_id=user_id,
        )

    def insert(
        self,
        user_id: str,
        email: str,
        display_name: Optional[str],
        role: UserRole = UserRole.USER,
    ) -> None:
        """Insert the profile row for a freshly created identity."""
        def _query() -> None:
            self.supabase.table(self.TABLE).insert({
                "id": user_id,
                "email": email,
                "display_name": display_name,
                "role": str(role),
            }).execute()

        self._execute(
            _query,
            operation_name="insert (users)",
            entity_id=user_id,
        )
        self._logger.info("Profile created: %s", user_id)
