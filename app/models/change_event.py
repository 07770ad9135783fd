"""
Realtime Change Event Model.

Normalises the row-level notifications pushed by the Supabase realtime
channel into a typed ``ChangeEvent``.  Two payload shapes are accepted:

- nested (realtime-py 2.x)::

    {"data": {"type": "INSERT", "table": "...", "schema": "public",
              "record": {...}, "old_record": {...},
              "commit_timestamp": "..."}, "ids": [...]}

- flat (supabase-js style)::

    {"eventType": "INSERT", "table": "...", "schema": "public",
     "new": {...}, "old": {...}, "commit_timestamp": "..."}

The untouched payload is kept on ``payload`` for consumers that need it.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from app.models.enums import ChangeEventType


class ChangeEvent(BaseModel):
    """A single insert/update/delete notification for a table."""

    event_type: ChangeEventType
    table: str
    schema_name: str = "public"
    record: Optional[dict[str, Any]] = None
    old_record: Optional[dict[str, Any]] = None
    commit_timestamp: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def record_id(self) -> Optional[str]:
        """Primary key of the affected row, taken from whichever side carries it."""
        for row in (self.record, self.old_record):
            if row and row.get("id") is not None:
                return str(row["id"])
        return None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ChangeEvent":
        """Build a ``ChangeEvent`` from a raw realtime payload.

        Raises:
            ValueError: If the payload carries no recognised event type.
        """
        body: dict[str, Any] = payload.get("data") if isinstance(payload.get("data"), dict) else payload

        raw_type = body.get("type") or body.get("eventType")
        if not raw_type:
            raise ValueError(f"Realtime payload has no event type: {payload!r}")

        record = body.get("record", body.get("new"))
        old_record = body.get("old_record", body.get("old"))

        return cls(
            event_type=ChangeEventType(str(raw_type).upper()),
            table=body.get("table", ""),
            schema_name=body.get("schema", "public"),
            # Empty dicts mean "no row on this side" (e.g. ``new`` on DELETE).
            record=record or None,
            old_record=old_record or None,
            commit_timestamp=body.get("commit_timestamp"),
            payload=payload,
        )
