"""
Trading-Session Schedule Module.

Timezone-aware scheduling and countdown engine for a trading dashboard: daily
macro windows, killzones, market sessions and one-off news releases.

Components:
- selector: next / next-after / lookahead per category
- active: in-range classification of recurring windows
- countdown: countdown and clock formatting
- timeline: contiguous 24h block layout
- news, status: news phases and the traffic-light trading status
- ScheduleEngine: per-tick orchestration into a DashboardSnapshot

Usage:
    from tradetime.schedule import ScheduleEngine

    snapshot = ScheduleEngine().snapshot(catalog, now=clock.now())
    snapshot.selection(EventCategory.MACRO).next
"""

from tradetime.schedule.active import active_windows, is_active_at, is_in_range
from tradetime.schedule.countdown import format_detailed, format_smart
from tradetime.schedule.engine import DashboardSnapshot, ReferenceClock, ScheduleEngine
from tradetime.schedule.errors import (
    ConfigurationError,
    InstantParseError,
    ScheduleError,
    TimezoneResolutionError,
)
from tradetime.schedule.selector import lookahead, next_after, next_occurrence, select
from tradetime.schedule.timeline import build_timeline
from tradetime.schedule.types import (
    BlockType,
    Catalog,
    CategorySelection,
    ClockTime,
    CountdownInfo,
    EventCategory,
    Impact,
    NewsTemplate,
    NextOccurrence,
    RecurringWindow,
    ScheduledInstant,
    TimeBlock,
    TimeInfo,
)

__all__ = [
    # Main entry point
    "ScheduleEngine",
    "DashboardSnapshot",
    "ReferenceClock",
    # Operations
    "next_occurrence",
    "next_after",
    "lookahead",
    "select",
    "is_in_range",
    "is_active_at",
    "active_windows",
    "format_detailed",
    "format_smart",
    "build_timeline",
    # Types
    "ClockTime",
    "TimeInfo",
    "RecurringWindow",
    "ScheduledInstant",
    "NewsTemplate",
    "Catalog",
    "EventCategory",
    "Impact",
    "BlockType",
    "NextOccurrence",
    "CategorySelection",
    "CountdownInfo",
    "TimeBlock",
    # Errors
    "ScheduleError",
    "TimezoneResolutionError",
    "InstantParseError",
    "ConfigurationError",
]
