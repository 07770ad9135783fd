"""
Vaccination Type Model.

Pydantic model for a row of the ``vaccination_types`` table.  ``title``
is fixed at creation; only ``description`` is ever updated.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class VaccinationType(BaseModel):
    """Represents a vaccination type record."""

    id: str
    title: str
    description: str
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
