"""
String Helpers.

Helpers for building PostgREST filter values from user input.
"""

from __future__ import annotations

import re

__all__ = ["escape_like_pattern", "contains_pattern"]

# ``\`` is the default LIKE escape character in Postgres.
_LIKE_SPECIAL_RE: re.Pattern[str] = re.compile(r"([\\%_])")


def escape_like_pattern(value: str) -> str:
    """Escape LIKE wildcards so *value* matches literally.

    ``%``, ``_`` and the escape character ``\\`` itself are prefixed with
    a backslash.

    >>> escape_like_pattern("50%_off")
    '50\\\\%\\\\_off'
    """
    return _LIKE_SPECIAL_RE.sub(r"\\\1", value)


def contains_pattern(value: str) -> str:
    """Return an ``ilike`` pattern matching any string containing *value*.

    An empty *value* yields ``%%``, which matches every row.
    """
    return f"%{escape_like_pattern(value)}%"
