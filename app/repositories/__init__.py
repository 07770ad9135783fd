"""
Repository Layer Package.

Provides data-access abstractions over the Supabase tables.
All table operations flow through repositories; services never build
queries on db.supabase directly.

Usage:
    from app.repositories.vaccination_type_repository import VaccinationTypeRepository
    from app.repositories.user_repository import UserRepository
"""

from app.repositories.base_repository import BaseRepository
from app.repositories.user_repository import UserRepository
from app.repositories.vaccination_type_repository import VaccinationTypeRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "VaccinationTypeRepository",
]
