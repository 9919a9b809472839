"""
Shared types, enums, and value objects for the scheduling engine.

Catalog definitions (RecurringWindow, ScheduledInstant, NewsTemplate) are owned by
the configuration layer and are read-only to the engine. Output types
(NextOccurrence, CategorySelection, ...) are recomputed every tick and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from tradetime.schedule.errors import ConfigurationError

MINUTES_PER_DAY = 24 * 60
SECONDS_PER_DAY = MINUTES_PER_DAY * 60


class EventCategory(str, Enum):
    """Event categories shown on the dashboard."""

    MACRO = "macro"
    KILLZONE = "killzone"
    MARKET_SESSION = "market_session"
    NEWS = "news"


class Impact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Probability(str, Enum):
    HIGH = "High"
    LOW = "Low"


class SessionType(str, Enum):
    """Kinds of generic market sessions."""

    PREMARKET = "premarket"
    MARKET_OPEN = "market-open"
    LUNCH = "lunch"
    AFTER_HOURS = "after-hours"
    CUSTOM = "custom"


class BlockType(str, Enum):
    """Timeline block types."""

    MACRO = "macro"
    KILLZONE = "killzone"
    PREMARKET = "premarket"
    MARKET_OPEN = "market-open"
    LUNCH = "lunch"
    AFTER_HOURS = "after-hours"
    CUSTOM = "custom"
    NEWS = "news"
    INACTIVE = "inactive"


class NewsPhase(str, Enum):
    COUNTDOWN = "countdown"
    HAPPENING = "happening"
    COOLDOWN = "cooldown"


class TradingStatus(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"


# -------- Value objects --------


@dataclass(frozen=True, slots=True)
class ClockTime:
    """A civil time-of-day. Timezone-unspecified unless paired with a zone label."""

    hours: int
    minutes: int

    def __post_init__(self) -> None:
        if not (0 <= self.hours <= 23):
            raise ConfigurationError("hours must be between 0 and 23", field="hours", value=self.hours)
        if not (0 <= self.minutes <= 59):
            raise ConfigurationError(
                "minutes must be between 0 and 59", field="minutes", value=self.minutes
            )

    @property
    def minutes_of_day(self) -> int:
        return self.hours * 60 + self.minutes

    @classmethod
    def from_minutes(cls, total_minutes: int) -> ClockTime:
        """Build a ClockTime from minutes-of-day, wrapping into [0, 1440)."""
        wrapped = int(total_minutes) % MINUTES_PER_DAY
        return cls(hours=wrapped // 60, minutes=wrapped % 60)

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}"


@dataclass(frozen=True, slots=True)
class TimeInfo:
    """Civil time in some zone, with a ``HH:MM:SS`` rendering."""

    hours: int
    minutes: int
    seconds: int = 0

    @property
    def formatted(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"

    def clock_time(self) -> ClockTime:
        return ClockTime(self.hours, self.minutes)


@dataclass(frozen=True, slots=True)
class CountdownInfo:
    display: str
    is_urgent: bool
    is_soon: bool


# -------- Catalog definitions --------


@dataclass(frozen=True)
class RecurringWindow:
    """
    A daily recurring window in UTC (macro, killzone or market session).

    If ``end <= start`` in minutes-of-day, the window crosses midnight and lasts
    ``(end + 1440) - start`` minutes. ``start == end`` is a zero-duration window.
    """

    id: str
    name: str
    start: ClockTime
    end: ClockTime
    region: Optional[str] = None
    description: Optional[str] = None
    impact: Optional[Impact] = None
    probability: Optional[Probability] = None
    session_type: Optional[SessionType] = None
    is_active: bool = True

    @property
    def crosses_midnight(self) -> bool:
        return self.end.minutes_of_day < self.start.minutes_of_day

    @property
    def is_zero_duration(self) -> bool:
        return self.end.minutes_of_day == self.start.minutes_of_day

    @property
    def duration_minutes(self) -> int:
        start = self.start.minutes_of_day
        end = self.end.minutes_of_day
        if end <= start:
            return (end + MINUTES_PER_DAY) - start
        return end - start


@dataclass(frozen=True)
class ScheduledInstant:
    """
    A one-off news release at an absolute instant.

    ``scheduled_time`` is kept as supplied (aware datetime or ISO-8601 string) and
    parsed lazily, so one malformed entry cannot invalidate the whole catalog.
    """

    id: str
    template_id: str
    name: str
    scheduled_time: Union[datetime, str]
    impact: Impact = Impact.MEDIUM
    is_active: bool = True
    description: Optional[str] = None
    region: Optional[str] = None


@dataclass(frozen=True)
class NewsTemplate:
    """Reusable news type; instances reference it by ``template_id``."""

    id: str
    name: str
    impact: Impact = Impact.MEDIUM
    countdown_minutes: int = 5  # start showing the countdown this long before
    cooldown_minutes: int = 15  # keep showing the event this long after
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.countdown_minutes < 0:
            raise ConfigurationError(
                "countdown_minutes must be non-negative",
                field="countdown_minutes",
                value=self.countdown_minutes,
            )
        if self.cooldown_minutes < 0:
            raise ConfigurationError(
                "cooldown_minutes must be non-negative",
                field="cooldown_minutes",
                value=self.cooldown_minutes,
            )


EventDefinition = Union[RecurringWindow, ScheduledInstant]


@dataclass(frozen=True)
class Catalog:
    """
    Read-only aggregate supplied whole on every invocation.

    The engine never mutates it; a replaced catalog is simply observed on the next tick.
    """

    macros: tuple[RecurringWindow, ...] = field(default_factory=tuple)
    killzones: tuple[RecurringWindow, ...] = field(default_factory=tuple)
    market_sessions: tuple[RecurringWindow, ...] = field(default_factory=tuple)
    news_instances: tuple[ScheduledInstant, ...] = field(default_factory=tuple)
    news_templates: tuple[NewsTemplate, ...] = field(default_factory=tuple)
    viewer_timezone: str = "UTC"

    def definitions(self, category: EventCategory) -> tuple[EventDefinition, ...]:
        """Definitions of one category, in catalog order."""
        if category == EventCategory.MACRO:
            return self.macros
        elif category == EventCategory.KILLZONE:
            return self.killzones
        elif category == EventCategory.MARKET_SESSION:
            return self.market_sessions
        elif category == EventCategory.NEWS:
            return self.news_instances
        raise ValueError(f"Unknown event category: {category!r}")

    def template(self, template_id: str) -> Optional[NewsTemplate]:
        for template in self.news_templates:
            if template.id == template_id:
                return template
        return None


# -------- Engine outputs --------


@dataclass(frozen=True)
class NextOccurrence:
    """
    One upcoming occurrence, ready for display.

    ``start_time`` is in the viewer zone; ``start_utc`` is the canonical start.
    """

    category: EventCategory
    source_id: str
    name: str
    start_time: ClockTime
    start_utc: ClockTime
    time_until_minutes: int
    time_until_seconds: int
    region: Optional[str] = None
    impact: Optional[Impact] = None


@dataclass(frozen=True)
class CategorySelection:
    category: EventCategory
    next: Optional[NextOccurrence] = None
    next_after: Optional[NextOccurrence] = None
    lookahead: tuple[NextOccurrence, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ActiveWindow:
    """A window that contains the current instant."""

    category: EventCategory
    window: RecurringWindow
    time_left_seconds: int
    elapsed_seconds: int


@dataclass(frozen=True)
class TimeBlock:
    """
    Labeled interval on the 24h timeline, in UTC.

    ``end_hour == 24`` (with ``end_minute == 0``) marks the end of the day.
    """

    type: BlockType
    name: str
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    description: Optional[str] = None
    probability: Optional[Probability] = None

    @property
    def start_minutes(self) -> int:
        return self.start_hour * 60 + self.start_minute

    @property
    def end_minutes(self) -> int:
        return self.end_hour * 60 + self.end_minute


@dataclass(frozen=True)
class ActiveNews:
    instance: ScheduledInstant
    template: NewsTemplate
    phase: NewsPhase


@dataclass(frozen=True)
class TradingStatusInfo:
    status: TradingStatus
    period: str
