"""
User Model.

Pydantic model for the ``users`` profile row.  The profile is keyed by
the Supabase identity id and carries the application-specific fields
(display name, role).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.models.enums import UserRole


class User(BaseModel):
    """Represents a user profile."""

    id: str  # Supabase identity UUID
    email: str
    display_name: Optional[str] = None
    role: UserRole = UserRole.USER
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @property
    def is_admin(self) -> bool:
        """``True`` when the profile carries the administrator role."""
        match self.role:
            case UserRole.ADMIN:
                return True
            case UserRole.USER:
                return False
