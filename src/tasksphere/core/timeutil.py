# src/tasksphere/core/timeutil.py

from __future__ import annotations

from datetime import UTC, datetime

_SECONDS_PER_DAY = 86400.0


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_aware(dt: datetime) -> datetime:
    """Naive datetimes are treated as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def opt_ensure_aware(dt: datetime | None) -> datetime | None:
    return None if dt is None else ensure_aware(dt)


def resolve_now(now: datetime | None = None) -> datetime:
    """Aware "now": the given moment (naive means UTC) or the current UTC time."""
    return utc_now() if now is None else ensure_aware(now)


def to_iso(dt: datetime) -> str:
    return ensure_aware(dt).isoformat()


def from_iso(raw: str) -> datetime:
    if not isinstance(raw, str):
        raise TypeError(f"expected ISO-8601 string, got {type(raw).__name__}")
    return ensure_aware(datetime.fromisoformat(raw))


def opt_to_iso(dt: datetime | None) -> str | None:
    return None if dt is None else to_iso(dt)


def opt_from_iso(raw: str | None) -> datetime | None:
    return None if raw is None else from_iso(raw)


def whole_days_between(start: datetime, end: datetime) -> int:
    """
    Number of whole days from start to end, truncated toward zero.

    23h59m ahead is 0 days, 25h behind is -1 day.
    """
    delta = ensure_aware(end) - ensure_aware(start)
    return int(delta.total_seconds() / _SECONDS_PER_DAY)
