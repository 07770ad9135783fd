"""
Base Service Class.

Every service reads the shared ``SessionManager``, so the base class holds
it next to the logger and turns "nobody signed in" into an ``AuthError``
that callers handle like any other authorization failure.
"""

from __future__ import annotations

from app.auth import SessionManager
from app.errors import AuthError
from app.logger import StructuredLogger
from app.models.user import User


class BaseService:
    """Base class for all service classes. Provides the session and a logger."""

    def __init__(self, session: SessionManager, logger: StructuredLogger) -> None:
        self._session: SessionManager = session
        self._logger: StructuredLogger = logger

    def _require_user(self) -> User:
        """Return the session user.

        Raises:
            AuthError: If nobody is signed in.
        """
        try:
            return self._session.get_current_user()
        except RuntimeError as exc:
            raise AuthError("Sign in required.", original_error=exc) from exc
