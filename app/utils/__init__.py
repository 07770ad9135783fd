"""Shared utility functions and models for the Vaccination Registry client.

This package provides convenience re-exports so that consumers can import
directly from ``app.utils`` (e.g. ``from app.utils import log_audit_event``)
while full absolute imports remain supported.
"""

from app.utils.audit import AuditEvent, log_audit_event
from app.utils.string_helpers import contains_pattern, escape_like_pattern

__all__ = [
    "AuditEvent",
    "contains_pattern",
    "escape_like_pattern",
    "log_audit_event",
]
