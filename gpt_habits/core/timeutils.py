# gpt_habits/core/timeutils.py
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    """SQLite devuelve datetimes naive aunque la columna sea timezone=True; se asumen UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def elapsed_ms(since: datetime, now: datetime) -> int:
    return int((as_utc(now) - as_utc(since)).total_seconds() * 1000)
