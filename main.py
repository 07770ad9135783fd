"""
Vaccination Registry Client Entry Point.

Bootstraps the entire dependency graph via constructor injection,
restores the current user from the backend session, and prints a short
status summary of the vaccination type catalog.  Every subsystem is wired
here, with no module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import atexit
import sys
import traceback

from app.auth import SessionManager
from app.config import get_config
from app.database import DatabaseManager
from app.errors import ConfigurationError, RecordError
from app.logger import StructuredLogger
from app.services import create_services


def main() -> None:
    """Application entry point: wire dependencies and report status."""
    # ------------------------------------------------------------------
    # 1. Configuration (fails fast when the Supabase URL or key is missing)
    # ------------------------------------------------------------------
    config = get_config()

    logger = StructuredLogger.from_config("main", config)
    logger.info("Starting Vaccination Registry client...")

    # ------------------------------------------------------------------
    # 2. Backend client
    # ------------------------------------------------------------------
    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger.from_config("database", config),
    )
    atexit.register(db.close)

    # ------------------------------------------------------------------
    # 3. Session + services
    # ------------------------------------------------------------------
    session = SessionManager()
    services = create_services(
        db=db,
        session=session,
        logger=StructuredLogger.from_config("services", config),
    )

    # ------------------------------------------------------------------
    # 4. Restore identity and summarise the catalog
    # ------------------------------------------------------------------
    try:
        user = services["auth_service"].fetch_current_user()
        if user is None:
            logger.info("No active session; signed out.")
        else:
            logger.info(
                "Signed in as %s (%s).",
                user.email,
                "Administrator" if session.is_admin else "User",
            )

        try:
            total = services["vaccination_service"].count()
            logger.info("Vaccination types available: %d", total)
        except RecordError as exc:
            logger.error("Failed to load vaccination types: %s", exc.message)
    finally:
        db.close()
        logger.info("Vaccination Registry client shut down.")


def _report_fatal_error(exc: BaseException) -> None:
    """Write a fatal error to stderr so command-line users get feedback."""
    if isinstance(exc, ConfigurationError):
        sys.stderr.write(f"FATAL: {exc}\n")
        return
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n{detail}")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _report_fatal_error(exc)
        sys.exit(1)
