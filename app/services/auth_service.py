"""
Authentication Service.

Single orchestrator for every identity transition: sign-up, sign-in,
sign-out, and refreshing the current user from the backend session.
It is the only component that mutates the ``SessionManager``.

State machine::

    Anonymous --sign_in--> Authenticated --sign_out--> Anonymous
    Anonymous --sign_up--> Anonymous      (sign-in is a separate step)

Error policy: ``sign_up``, ``sign_in`` and ``sign_out`` record the
backend's message in ``SessionManager.last_error`` and raise
``AuthError``.  ``fetch_current_user`` never raises; it degrades to the
anonymous state and logs.

Sign-up is two backend calls (identity, then profile row) with no
transaction between them.  When the profile insert fails the identity is
left without a profile; this is logged under ``SIGN_UP_ORPHANED_IDENTITY``
and not compensated.
"""

from __future__ import annotations

from typing import Optional

from app.auth import SessionManager
from app.database import DatabaseManager
from app.errors import AuthError, RecordError, backend_message
from app.logger import StructuredLogger
from app.models.enums import UserRole
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService


class AuthService(BaseService):
    """Centralised authentication service.

    Parameters
    ----------
    db:
        Backend connection holder (Supabase client).
    session:
        Injectable session holder shared with every consumer.
    user_repo:
        Access to the ``users`` profile table.
    logger:
        Structured JSON logger.
    """

    def __init__(
        self,
        db: DatabaseManager,
        session: SessionManager,
        user_repo: UserRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(session, logger)
        self._db: DatabaseManager = db
        self._user_repo: UserRepository = user_repo

    # ==================================================================
    # Helpers
    # ==================================================================

    @staticmethod
    def normalize_email(email: str) -> str:
        """Strip whitespace and lowercase the email address."""
        return email.strip().lower()

    @staticmethod
    def _require_credentials(email: str, password: str) -> None:
        if not email or not email.strip() or not password:
            raise AuthError("Email and password are required.")

    def _begin(self) -> None:
        self._session.set_loading(True)
        self._session.clear_error()

    # ==================================================================
    # Sign-up
    # ==================================================================

    def sign_up(self, email: str, password: str, display_name: str) -> None:
        """Create an identity and its ``user``-role profile row.

        Does not authenticate: if the backend opened a session as part of
        sign-up it is closed again and the store stays anonymous.

        Raises
        ------
        AuthError
            Missing credentials, identity creation failure (e.g. duplicate
            email), or profile insert failure.
        """
        self._begin()
        try:
            self._require_credentials(email, password)
            email = self.normalize_email(email)
            display_name = display_name.strip() if display_name else ""

            try:
                response = self._db.supabase.auth.sign_up({
                    "email": email,
                    "password": password,
                    "options": {"data": {"display_name": display_name}},
                })
            except Exception as exc:
                self._logger.warning(
                    "Sign-up failed for %s: %s", email, backend_message(exc),
                    extra={"event": "SIGN_UP_FAILED", "email": email},
                )
                raise AuthError(backend_message(exc), original_error=exc) from exc

            identity = response.user
            if identity is None:
                raise AuthError("Sign up failed")

            try:
                self._user_repo.insert(
                    user_id=identity.id,
                    email=email,
                    display_name=display_name or None,
                    role=UserRole.USER,
                )
            except RecordError as exc:
                self._logger.error(
                    "Profile insert failed for identity %s: %s",
                    identity.id,
                    exc.message,
                    extra={
                        "event": "SIGN_UP_ORPHANED_IDENTITY",
                        "email": email,
                        "user_id": identity.id,
                    },
                )
                raise AuthError(exc.message, original_error=exc) from exc

            if response.session is not None:
                self._close_signup_session(email)

            self._logger.info(
                "User registered: %s",
                email,
                extra={"event": "SIGN_UP", "email": email, "user_id": identity.id},
            )

        except AuthError as exc:
            self._session.set_error(exc.message)
            raise

        finally:
            self._session.set_loading(False)

    def _close_signup_session(self, email: str) -> None:
        """End the session some backends open on sign-up."""
        try:
            self._db.supabase.auth.sign_out()
        except Exception as exc:
            self._logger.warning(
                "Could not close sign-up session for %s: %s", email, exc,
            )

    # ==================================================================
    # Sign-in
    # ==================================================================

    def sign_in(self, email: str, password: str) -> Optional[User]:
        """Exchange credentials for a session and load the profile.

        Returns
        -------
        Optional[User]
            The loaded profile, or ``None`` when the identity has no
            profile row.

        Raises
        ------
        AuthError
            Missing or invalid credentials; message is the backend's.
        """
        self._begin()
        try:
            self._require_credentials(email, password)
            email = self.normalize_email(email)

            try:
                response = self._db.supabase.auth.sign_in_with_password({
                    "email": email,
                    "password": password,
                })
            except Exception as exc:
                self._logger.warning(
                    "Sign-in failed for %s: %s", email, backend_message(exc),
                    extra={"event": "SIGN_IN_FAILED", "email": email},
                )
                raise AuthError(backend_message(exc), original_error=exc) from exc

            if response.session is None:
                raise AuthError("Sign in failed")

            self._session.set_session_token(response.session.access_token)
            user = self._refresh_profile()

            self._logger.info(
                "User authenticated: %s (role: %s)",
                email,
                user.role if user is not None else "none",
                extra={
                    "event": "SIGN_IN",
                    "email": email,
                    "user_id": response.user.id if response.user else "unknown",
                },
            )
            return user

        except AuthError as exc:
            self._session.set_error(exc.message)
            raise

        finally:
            self._session.set_loading(False)

    # ==================================================================
    # Sign-out
    # ==================================================================

    def sign_out(self) -> None:
        """Invalidate the backend session, then clear local state.

        Raises
        ------
        AuthError
            When the backend refuses; local state is left untouched.
        """
        user = self._session.user
        user_email = user.email if user is not None else "unknown"

        self._begin()
        try:
            try:
                self._db.supabase.auth.sign_out()
            except Exception as exc:
                self._logger.warning(
                    "Server-side sign_out failed for %s: %s", user_email, backend_message(exc),
                    extra={"event": "SIGN_OUT_FAILED", "email": user_email},
                )
                raise AuthError(backend_message(exc), original_error=exc) from exc

            self._session.clear()
            self._logger.info(
                "User signed out: %s",
                user_email,
                extra={"event": "SIGN_OUT", "email": user_email},
            )

        except AuthError as exc:
            self._session.set_error(exc.message)
            raise

        finally:
            self._session.set_loading(False)

    # ==================================================================
    # Current user
    # ==================================================================

    def fetch_current_user(self) -> Optional[User]:
        """Re-read the backend session and profile into the store.

        Never raises.  "No session" and "no profile row yet" are both
        valid steady states and yield ``None``; any other failure is
        logged and also yields ``None``.
        """
        self._session.set_loading(True)
        try:
            return self._refresh_profile()
        finally:
            self._session.set_loading(False)

    def _refresh_profile(self) -> Optional[User]:
        try:
            current = self._db.supabase.auth.get_session()
            if current is None:
                self._session.clear()
                return None

            self._session.set_session_token(current.access_token)

            try:
                user = self._user_repo.get_by_id(current.user.id)
            except RecordError as exc:
                if not exc.is_not_found:
                    raise
                self._logger.info(
                    "No profile row for identity %s.", current.user.id,
                    extra={"event": "PROFILE_MISSING", "user_id": current.user.id},
                )
                self._session.set_current_user(None)
                return None

            self._session.set_current_user(user)
            return user

        except Exception as exc:
            self._logger.error(
                "Fetch user error: %s", exc,
                extra={"event": "FETCH_USER_FAILED"},
            )
            self._session.set_current_user(None)
            return None

    # ==================================================================
    # Error flag
    # ==================================================================

    def clear_error(self) -> None:
        """Reset the recorded error message."""
        self._session.clear_error()
