from __future__ import annotations

"""
Data Models Package.

Re-exports all Pydantic models:
    from app.models import User, VaccinationType, ChangeEvent
    from app.models import UserRole, ChangeEventType
"""

from app.models.auth_models import SessionSnapshot
from app.models.change_event import ChangeEvent
from app.models.enums import ChangeEventType, UserRole
from app.models.user import User
from app.models.vaccination_type import VaccinationType

__all__ = [
    "ChangeEvent",
    "ChangeEventType",
    "SessionSnapshot",
    "User",
    "UserRole",
    "VaccinationType",
]
