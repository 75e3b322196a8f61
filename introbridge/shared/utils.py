"""Shared utility functions used across components."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Return datetime as timezone-aware UTC. Returns None if input is None."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def month_start(dt: datetime) -> datetime:
    return ensure_utc(dt).replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def previous_month_start(dt: datetime) -> datetime:
    first = month_start(dt)
    if first.month == 1:
        return first.replace(year=first.year - 1, month=12)
    return first.replace(month=first.month - 1)
