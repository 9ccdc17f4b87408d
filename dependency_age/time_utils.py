"""
Shared datetime helpers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


_UNITS = (
    ("year", 365 * 24 * 60 * 60),
    ("month", 30 * 24 * 60 * 60),
    ("day", 24 * 60 * 60),
    ("hour", 60 * 60),
    ("minute", 60),
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return a timezone-aware UTC datetime."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp and normalize it to UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(parsed)


def to_epoch_ms(dt: datetime) -> int:
    return int(ensure_utc(dt).timestamp() * 1000)


def from_epoch_ms(value: float) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def relative_age(dt: datetime, now: Optional[datetime] = None) -> str:
    """Describe ``dt`` relative to ``now``, e.g. ``"3 years ago"``."""
    now = ensure_utc(now) if now is not None else utc_now()
    seconds = (now - ensure_utc(dt)).total_seconds()
    future = seconds < 0
    seconds = abs(seconds)

    for unit, size in _UNITS:
        count = int(seconds // size)
        if count >= 1:
            label = unit if count == 1 else f"{unit}s"
            return f"in {count} {label}" if future else f"{count} {label} ago"
    return "just now"
