"""Time helpers.

Keep all timestamps consistent and timezone-aware.
Python 3.12 deprecates naive UTC helpers like datetime.utcnow(); use this module instead.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current time as a timezone-aware datetime in UTC (+00:00)."""

    return datetime.now(timezone.utc)


def utcnow_sa_default() -> datetime:
    """SQLAlchemy-friendly default callable for UTC timestamps."""

    return utcnow()


def ensure_utc(dt: datetime) -> datetime:
    """Return a timezone-aware UTC datetime.

    - If `dt` is naive, it is treated as UTC (SQLite drops tzinfo on round-trip).
    - If `dt` is timezone-aware, it is converted to UTC.
    """

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def compact_timestamp(dt: datetime) -> str:
    """Format as YYYYMMDDHHMMSS (used to suffix uploaded logo names)."""

    return ensure_utc(dt).strftime("%Y%m%d%H%M%S")
