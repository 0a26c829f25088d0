from __future__ import annotations

from collections.abc import Mapping
from datetime import date as Date
from datetime import datetime, timezone
from typing import Any


def utc_day(instant: datetime) -> Date:
    """UTC calendar date of ``instant``. Naive datetimes are read as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc).date()
    return instant.astimezone(timezone.utc).date()


def _coerce_timestamp(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _coerce_count(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _timestamp_day(ts: int) -> Date | None:
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).date()
    except (OverflowError, OSError, ValueError):
        return None


def normalize(
    raw: Mapping[str | int, Any] | None, *, now: datetime | None = None
) -> list[Date]:
    """
    Collapse a ``{timestamp_seconds: count}`` calendar into canonical UTC days.

    Entries with a count <= 0 and keys that are not epoch seconds are skipped.
    When ``now`` is given, days after its UTC date are dropped.
    The result is strictly descending (most recent first).
    """
    if not raw:
        return []

    latest = utc_day(now) if now is not None else None
    days: set[Date] = set()
    for key, value in raw.items():
        count = _coerce_count(value)
        if count is None or count <= 0:
            continue
        ts = _coerce_timestamp(key)
        if ts is None:
            continue
        day = _timestamp_day(ts)
        if day is None:
            continue
        if latest is not None and day > latest:
            continue
        days.add(day)

    return sorted(days, reverse=True)
