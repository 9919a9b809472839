"""
Active-Window Classifier.

A window ``[start, end)`` is active when it contains the current UTC minute:
- ``start < end``:  start <= now < end
- ``end < start``:  now >= start or now < end (crosses midnight)
- ``start == end``: never active (zero duration)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from tradetime.schedule.types import (
    SECONDS_PER_DAY,
    ActiveWindow,
    EventCategory,
    RecurringWindow,
)


def is_in_range(now_minutes: int, window: RecurringWindow) -> bool:
    start = window.start.minutes_of_day
    end = window.end.minutes_of_day
    if start == end:
        return False
    if start < end:
        return start <= now_minutes < end
    return now_minutes >= start or now_minutes < end


def is_active_at(now: datetime, window: RecurringWindow) -> bool:
    """``is_in_range`` for an instant; disabled windows are never active."""
    if not window.is_active:
        return False
    utc = now.astimezone(timezone.utc) if now.tzinfo else now
    return is_in_range(utc.hour * 60 + utc.minute, window)


def _seconds_of_day(now: datetime) -> int:
    utc = now.astimezone(timezone.utc) if now.tzinfo else now
    return utc.hour * 3600 + utc.minute * 60 + utc.second


def time_left_seconds(now: datetime, window: RecurringWindow) -> int:
    """Seconds until the window's next end, wrapping past midnight."""
    end = window.end.minutes_of_day * 60
    left = end - _seconds_of_day(now)
    if left <= 0:
        left += SECONDS_PER_DAY
    return left


def elapsed_seconds(now: datetime, window: RecurringWindow) -> int:
    """Seconds since the window's most recent start."""
    start = window.start.minutes_of_day * 60
    elapsed = _seconds_of_day(now) - start
    if elapsed < 0:
        elapsed += SECONDS_PER_DAY
    return elapsed


def active_windows(
    now: datetime,
    windows: Iterable[RecurringWindow],
    category: EventCategory = EventCategory.MACRO,
) -> list[ActiveWindow]:
    """Windows containing ``now``, soonest-ending first (catalog order on ties)."""
    found = [
        ActiveWindow(
            category=category,
            window=window,
            time_left_seconds=time_left_seconds(now, window),
            elapsed_seconds=elapsed_seconds(now, window),
        )
        for window in windows
        if is_active_at(now, window)
    ]
    return sorted(found, key=lambda a: a.time_left_seconds)
