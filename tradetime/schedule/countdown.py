"""
Countdown and clock formatting.

Two urgency threshold sets are in use and both are kept as-is:
- ``format_detailed``: urgent <= 5 min, soon <= 30 min (next-events panel)
- ``format_countdown_seconds`` / ``format_countdown_minutes``: urgent <= 15 min,
  soon <= 60 min (status header)
"""

from __future__ import annotations

import math
from typing import Final, Optional

from tradetime.schedule.types import MINUTES_PER_DAY, ClockTime, CountdownInfo

DETAILED_URGENT_MINUTES: Final[int] = 5
DETAILED_SOON_MINUTES: Final[int] = 30

STATUS_URGENT_MINUTES: Final[int] = 15
STATUS_SOON_MINUTES: Final[int] = 60

# Seconds are force-revealed below this many minutes, regardless of preference
SECONDS_REVEAL_MINUTES: Final[int] = 5

_NOW: Final[CountdownInfo] = CountdownInfo(display="Now", is_urgent=True, is_soon=True)


def format_detailed(total_minutes: float, show_seconds: bool = False) -> CountdownInfo:
    """
    Render a countdown given in (possibly fractional) minutes.

    Without seconds, the not-soon band below one hour keeps a ``0h`` prefix
    (45 -> "0h 45m", 30 -> "30m").
    """
    if total_minutes <= 0:
        return _NOW

    is_urgent = total_minutes <= DETAILED_URGENT_MINUTES
    is_soon = total_minutes <= DETAILED_SOON_MINUTES

    if show_seconds:
        total_seconds = math.floor(total_minutes * 60)
        hours, remainder = divmod(total_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)
        if hours > 0:
            display = f"{hours}h {minutes}m {seconds}s"
        elif minutes > 0:
            display = f"{minutes}m {seconds}s"
        else:
            display = f"{seconds}s"
    else:
        whole_minutes = math.floor(total_minutes)
        hours, minutes = divmod(whole_minutes, 60)
        if hours > 0:
            display = f"{hours}h {minutes}m"
        elif not is_soon:
            display = f"0h {minutes}m"
        else:
            display = f"{minutes}m"

    return CountdownInfo(display=display, is_urgent=is_urgent, is_soon=is_soon)


def format_countdown_seconds(total_seconds: int) -> CountdownInfo:
    """Status-header countdown from seconds (15 min urgent, 1 h soon)."""
    if total_seconds <= 0:
        return _NOW

    total_seconds = int(total_seconds)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    if hours > 0:
        display = f"{hours}h {minutes}m"
    elif minutes > 0:
        display = f"{minutes}m {seconds}s"
    else:
        display = f"{seconds}s"

    return CountdownInfo(
        display=display,
        is_urgent=total_seconds <= STATUS_URGENT_MINUTES * 60,
        is_soon=total_seconds <= STATUS_SOON_MINUTES * 60,
    )


def format_countdown_minutes(total_minutes: int) -> CountdownInfo:
    """Status-header countdown from whole minutes (15 min urgent, 1 h soon)."""
    if total_minutes <= 0:
        return _NOW

    hours, minutes = divmod(int(total_minutes), 60)
    display = f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"
    return CountdownInfo(
        display=display,
        is_urgent=total_minutes <= STATUS_URGENT_MINUTES,
        is_soon=total_minutes <= STATUS_SOON_MINUTES,
    )


def format_time(
    hours: int, minutes: int, seconds: Optional[int] = None, show_seconds: bool = False
) -> str:
    if show_seconds and seconds is not None:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{hours:02d}:{minutes:02d}"


def _reveal_seconds(show_seconds: bool, countdown_minutes: Optional[float]) -> bool:
    # urgency overrides the user preference
    is_countdown_low = countdown_minutes is not None and countdown_minutes < SECONDS_REVEAL_MINUTES
    return bool(show_seconds) or is_countdown_low


def format_smart(
    hours: int,
    minutes: int,
    seconds: Optional[int] = None,
    show_seconds: bool = False,
    countdown_minutes: Optional[float] = None,
) -> str:
    """
    "HH:MM", or "HH:MM:SS" when seconds are requested or the countdown is under
    five minutes. Seconds are never shown when ``seconds`` is None.
    """
    if _reveal_seconds(show_seconds, countdown_minutes) and seconds is not None:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{hours:02d}:{minutes:02d}"


def format_countdown_smart(
    hours: int,
    minutes: int,
    seconds: Optional[int] = None,
    show_seconds: bool = False,
    countdown_minutes: Optional[float] = None,
) -> str:
    """Zero-padded countdown, "01h 05m" or "01h 05m 09s"."""
    if _reveal_seconds(show_seconds, countdown_minutes) and seconds is not None:
        return f"{hours:02d}h {minutes:02d}m {seconds:02d}s"
    return f"{hours:02d}h {minutes:02d}m"


def format_duration(start: ClockTime, end: ClockTime) -> str:
    """Length of a daily window ("1h 30m", "45m", "2h"); ``end <= start`` wraps midnight."""
    start_minutes = start.minutes_of_day
    end_minutes = end.minutes_of_day
    if end_minutes <= start_minutes:
        end_minutes += MINUTES_PER_DAY

    hours, minutes = divmod(end_minutes - start_minutes, 60)
    if hours == 0:
        return f"{minutes}m"
    elif minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"
