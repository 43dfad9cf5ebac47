"""Utility helpers for timezone-aware session timing."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .config import TIMEZONE


def utc_now() -> datetime:
    """Return the current datetime in UTC."""
    return datetime.now(TIMEZONE)


def elapsed_minutes(start: datetime, end: datetime) -> float:
    """Return the minutes between two timestamps, never negative."""
    return max(0.0, (end - start).total_seconds() / 60.0)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime for storage, keeping millisecond precision."""
    if dt is None:
        return None
    return dt.isoformat(timespec="milliseconds")


def from_iso(raw: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO timestamp; naive values are taken as UTC."""
    if not raw:
        return None
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=TIMEZONE)
    return parsed
