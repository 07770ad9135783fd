"""
Session State Models.

Read-only view of the session store handed to consumers that render
identity-dependent controls.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from app.models.user import User


class SessionSnapshot(BaseModel):
    """Point-in-time copy of the session store.

    Attributes
    ----------
    user:
        The loaded profile, or ``None`` when anonymous.
    session_token:
        The current access token, or ``None``.
    is_loading:
        ``True`` while an identity transition is in flight.
    last_error:
        Message of the last failed identity operation.
    is_admin:
        Derived from ``user.role``.
    """

    user: Optional[User] = None
    session_token: Optional[str] = None
    is_loading: bool = False
    last_error: Optional[str] = None
    is_admin: bool = False

    model_config = {"frozen": True}

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.session_token is not None
