"""
Authentication & Session State.

Provides an injectable ``SessionManager`` that holds the authenticated
user, the session token, and the loading/error flags for the lifetime
of the process.  Only ``AuthService`` mutates it; every other component
reads it.

Usage::

    from app.auth import SessionManager

    session = SessionManager()
    if session.is_admin:
        ...  # render privileged controls
"""

from __future__ import annotations

import threading
from typing import Optional

from app.models.auth_models import SessionSnapshot
from app.models.user import User


class SessionManager:
    """Injectable holder for the current authentication state.

    Each instance maintains its own session state, eliminating the
    need for module-level globals.  Pass a single ``SessionManager``
    through your dependency-injection layer so every component shares
    the same session.

    ``is_admin`` is derived from the loaded profile and is never stored
    on its own.
    """

    def __init__(self) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._current_user: Optional[User] = None
        self._session_token: Optional[str] = None
        self._is_loading: bool = False
        self._last_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def set_current_user(self, user: Optional[User]) -> None:
        """Record *user* as the session user (``None`` for anonymous)."""
        with self._lock:
            self._current_user = user

    def get_current_user(self) -> User:
        """Return the authenticated user.

        Raises:
            RuntimeError: If no user is currently authenticated.
        """
        with self._lock:
            if self._current_user is None:
                raise RuntimeError(
                    "No user is currently authenticated. Sign in required."
                )
            return self._current_user

    @property
    def user(self) -> Optional[User]:
        with self._lock:
            return self._current_user

    def set_session_token(self, token: Optional[str]) -> None:
        with self._lock:
            self._session_token = token

    @property
    def session_token(self) -> Optional[str]:
        """Return the current access token, or ``None`` if not set."""
        with self._lock:
            return self._session_token

    @property
    def is_admin(self) -> bool:
        with self._lock:
            return self._current_user is not None and self._current_user.is_admin

    @property
    def is_authenticated(self) -> bool:
        """``True`` when a profile and a token are both present."""
        with self._lock:
            return self._current_user is not None and self._session_token is not None

    def clear(self) -> None:
        """Remove the current user and token, ending the session.

        ``last_error`` is left as-is so a failure message survives the reset.
        """
        with self._lock:
            self._current_user = None
            self._session_token = None

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    def set_loading(self, loading: bool) -> None:
        with self._lock:
            self._is_loading = loading

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._is_loading

    def set_error(self, message: Optional[str]) -> None:
        with self._lock:
            self._last_error = message

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    def clear_error(self) -> None:
        self.set_error(None)

    # ------------------------------------------------------------------
    # Read model
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        """Return a consistent, immutable copy of the whole state."""
        with self._lock:
            return SessionSnapshot(
                user=self._current_user,
                session_token=self._session_token,
                is_loading=self._is_loading,
                last_error=self._last_error,
                is_admin=self.is_admin,
            )
