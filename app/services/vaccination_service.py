"""
Vaccination Type Service.

Entry point for screens and scripts working with the vaccination type
catalog.  Reads are open to any caller; create, update and delete require
the session user to be an administrator, mirroring which controls the
screens render.  ``create`` takes the creator reference from the session.

Errors from the repository (``RecordError``) propagate unchanged; callers
own user-facing messaging.
"""

from __future__ import annotations

from typing import Optional

from app.auth import SessionManager
from app.errors import AuthError
from app.logger import StructuredLogger
from app.models.enums import UserRole
from app.models.user import User
from app.models.vaccination_type import VaccinationType
from app.realtime import ChangeCallback, ChangeSubscription
from app.repositories.vaccination_type_repository import VaccinationTypeRepository
from app.services.base_service import BaseService
from app.utils.audit import log_audit_event

_ENTITY_TYPE: str = "VaccinationType"


class VaccinationTypeService(BaseService):
    """Service layer for the vaccination type catalog."""

    def __init__(
        self,
        repo: VaccinationTypeRepository,
        session: SessionManager,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(session, logger)
        self._repo = repo

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_all(self) -> list[VaccinationType]:
        return self._repo.list_all()

    def get(self, record_id: str) -> VaccinationType:
        return self._repo.get_by_id(record_id)

    def search(self, query: str) -> list[VaccinationType]:
        return self._repo.search(query)

    def count(self) -> int:
        """Number of records, as shown on the home dashboard."""
        return len(self._repo.list_all())

    def subscribe_to_changes(
        self,
        callback: Optional[ChangeCallback] = None,
    ) -> ChangeSubscription:
        return self._repo.subscribe_to_changes(callback)

    # ------------------------------------------------------------------
    # Administrator writes
    # ------------------------------------------------------------------

    def create(self, title: str, description: str) -> VaccinationType:
        """Create a record owned by the session administrator.

        Raises:
            AuthError: If the session user is not an administrator.
            RecordError: On backend failure.
        """
        admin = self._require_admin()
        created = self._repo.create(title, description, admin.id)
        log_audit_event(
            self._logger,
            action="CREATE",
            entity_type=_ENTITY_TYPE,
            entity_id=created.id,
            user_id=admin.id,
            details={"title": created.title},
        )
        return created

    def update(self, record_id: str, description: str) -> VaccinationType:
        """Replace a record's description.

        Raises:
            AuthError: If the session user is not an administrator.
            RecordError: On backend failure or unknown id.
        """
        admin = self._require_admin()
        updated = self._repo.update(record_id, description)
        log_audit_event(
            self._logger,
            action="UPDATE",
            entity_type=_ENTITY_TYPE,
            entity_id=record_id,
            user_id=admin.id,
            details={"description_length": len(description)},
        )
        return updated

    def delete(self, record_id: str) -> None:
        """Delete a record.

        Raises:
            AuthError: If the session user is not an administrator.
            RecordError: On backend failure or unknown id.
        """
        admin = self._require_admin()
        self._repo.delete(record_id)
        log_audit_event(
            self._logger,
            action="DELETE",
            entity_type=_ENTITY_TYPE,
            entity_id=record_id,
            user_id=admin.id,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_admin(self) -> User:
        user = self._require_user()
        match user.role:
            case UserRole.ADMIN:
                return user
            case UserRole.USER:
                self._logger.warning(
                    "Rejected catalog write by non-admin %s", user.id,
                    extra={"event": "ADMIN_REQUIRED", "user_id": user.id},
                )
                raise AuthError("Administrator privileges required.")
