from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date as Date
from datetime import datetime, timedelta
from typing import Any

from streakcard.services.calendar import normalize, utc_day

_ONE_DAY = timedelta(days=1)


def _is_strictly_descending(days: Sequence[Date]) -> bool:
    return all(newer > older for newer, older in zip(days, days[1:]))


def evaluate(days: Sequence[Date], *, now: datetime) -> int:
    """
    Current streak for a canonical day set.

    The most recent day must be today or yesterday (UTC); the walk then counts
    consecutive days backwards and stops at the first gap.

    ``days`` must be strictly descending with no duplicates. The precondition
    is an ``assert`` (a linear scan), so it is skipped under ``python -O``.
    """
    assert _is_strictly_descending(days), "days must be strictly descending"

    if not days:
        return 0

    today = utc_day(now)
    anchor = days[0]
    if anchor != today and anchor != today - _ONE_DAY:
        return 0

    current = 0
    expected = anchor
    for day in days:
        if day == expected:
            current += 1
            expected -= _ONE_DAY
        elif day < expected:
            break

    return current


def current_streak(raw: Mapping[str | int, Any] | None, *, now: datetime) -> int:
    return evaluate(normalize(raw, now=now), now=now)
