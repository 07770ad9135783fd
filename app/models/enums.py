"""
Shared Enumerations for Vaccination Registry Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so raw rows like ``{"role": "admin"}`` validate directly.
"""

from __future__ import annotations
from enum import StrEnum


class UserRole(StrEnum):
    """Application roles stored on the ``users`` profile row.

    The role is written once at sign-up and never changed by this
    client.
    """

    ADMIN = "admin"
    USER = "user"


class ChangeEventType(StrEnum):
    """Row-level change kinds delivered by the realtime feed."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
