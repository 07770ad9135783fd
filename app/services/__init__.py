"""
Business Logic Services Package.

Services depend on the Repository layer for data access and on the
``SessionManager`` for user context.

The ``create_services()`` factory wires every repository and service together,
returning a typed dict that the application layer can consume without
knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import TypedDict

from app.auth import SessionManager
from app.database import DatabaseManager
from app.logger import StructuredLogger, get_logger
from app.repositories.user_repository import UserRepository
from app.repositories.vaccination_type_repository import VaccinationTypeRepository
from app.services.auth_service import AuthService
from app.services.vaccination_service import VaccinationTypeService


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    auth_service: AuthService
    vaccination_service: VaccinationTypeService


def create_services(
    db: DatabaseManager,
    session: SessionManager,
    logger: StructuredLogger | None = None,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup.

    Args:
        db: Initialised DatabaseManager holding the Supabase client.
        session: The process-wide session holder.
        logger: Logger shared by repositories and services; defaults to
            ``get_logger("services")``.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = logger or get_logger("services")

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    user_repo = UserRepository(db=db, logger=logger)
    vaccination_repo = VaccinationTypeRepository(db=db, logger=logger)

    # ------------------------------------------------------------------
    # 2. Services
    # ------------------------------------------------------------------
    auth_service = AuthService(
        db=db,
        session=session,
        user_repo=user_repo,
        logger=logger,
    )
    vaccination_service = VaccinationTypeService(
        repo=vaccination_repo,
        session=session,
        logger=logger,
    )

    return ServiceContainer(
        auth_service=auth_service,
        vaccination_service=vaccination_service,
    )
