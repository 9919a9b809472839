"""
Next-Occurrence Selector.

Given ``now`` (UTC) and the definitions of one category, computes the time until
every definition starts, then picks:

- next:        minimum time-until; ties go to the first definition in catalog order
- next_after:  minimum among those strictly later than ``next``
- lookahead:   all strictly later than ``next``, ascending, truncated to ``limit``

Recurring windows wrap to tomorrow when their start is not strictly in the future
(``until <= 0`` -> ``until + 1440``). Scheduled instants never wrap: an elapsed or
unparsable instant is excluded.

Every produced occurrence is converted to the viewer zone exactly once, against
the same ``now`` that drove the selection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import singledispatch
from typing import Iterable, Optional, Sequence

from tradetime.schedule import civil_time
from tradetime.schedule.errors import InstantParseError
from tradetime.schedule.types import (
    MINUTES_PER_DAY,
    CategorySelection,
    ClockTime,
    EventCategory,
    EventDefinition,
    NextOccurrence,
    RecurringWindow,
    ScheduledInstant,
)

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD_LIMIT = 4


@dataclass(frozen=True)
class _Candidate:
    """Internal scratch record, one per schedulable definition."""

    index: int  # catalog position, used as tie-break
    definition: EventDefinition
    until_minutes: int
    until_seconds: int

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.until_seconds, self.index)


def ensure_utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def parse_instant(value: datetime | str) -> datetime:
    """
    Parse a scheduled instant into an aware UTC datetime.

    Accepts aware or naive datetimes (naive read as UTC) and ISO-8601 strings,
    including a trailing "Z". Raises InstantParseError otherwise, including for
    instants that fall outside the datetime range once shifted to UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif not isinstance(value, str) or not value.strip():
        raise InstantParseError("Scheduled instant is empty or not a string", raw_value=value)
    else:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InstantParseError(
                f"Unparsable scheduled instant: {value!r}", raw_value=value
            ) from exc
    try:
        return ensure_utc(parsed)
    except OverflowError as exc:
        raise InstantParseError(
            f"Scheduled instant out of range in UTC: {value!r}", raw_value=value
        ) from exc


# -------- time-until per definition kind ---------------------------------------


@singledispatch
def _time_until(definition: object, now: datetime) -> Optional[tuple[int, int]]:
    """Return ``(until_minutes, until_seconds)`` or None when not schedulable."""
    raise TypeError(f"Unsupported event definition: {type(definition).__name__}")


@_time_until.register
def _(definition: RecurringWindow, now: datetime) -> Optional[tuple[int, int]]:
    now_minutes = now.hour * 60 + now.minute
    until = definition.start.minutes_of_day - now_minutes
    if until <= 0:
        # next daily occurrence is tomorrow
        until += MINUTES_PER_DAY
    return until, until * 60 - now.second


@_time_until.register
def _(definition: ScheduledInstant, now: datetime) -> Optional[tuple[int, int]]:
    try:
        scheduled = parse_instant(definition.scheduled_time)
    except InstantParseError as exc:
        logger.warning(
            "instant_unparsable",
            extra={
                "event": "instant_unparsable",
                "instance_id": definition.id,
                "error": str(exc),
            },
        )
        return None
    if scheduled <= now:
        return None
    delta_seconds = int((scheduled - now).total_seconds())
    return delta_seconds // 60, delta_seconds


# -------- conversion to display occurrences -------------------------------------


@singledispatch
def _to_occurrence(
    definition: object, candidate: _Candidate, category: EventCategory, zone_name: str, now: datetime
) -> NextOccurrence:
    raise TypeError(f"Unsupported event definition: {type(definition).__name__}")


@_to_occurrence.register
def _(
    definition: RecurringWindow,
    candidate: _Candidate,
    category: EventCategory,
    zone_name: str,
    now: datetime,
) -> NextOccurrence:
    start = definition.start
    local = civil_time.to_zone(start.hours, start.minutes, zone_name, at=now)
    return NextOccurrence(
        category=category,
        source_id=definition.id,
        name=definition.name,
        start_time=local.clock_time(),
        start_utc=start,
        time_until_minutes=candidate.until_minutes,
        time_until_seconds=candidate.until_seconds,
        region=definition.region,
        impact=definition.impact,
    )


@_to_occurrence.register
def _(
    definition: ScheduledInstant,
    candidate: _Candidate,
    category: EventCategory,
    zone_name: str,
    now: datetime,
) -> NextOccurrence:
    scheduled = parse_instant(definition.scheduled_time)
    local = civil_time.instant_in_zone(scheduled, zone_name)
    return NextOccurrence(
        category=category,
        source_id=definition.id,
        name=definition.name,
        start_time=local.clock_time(),
        start_utc=ClockTime(scheduled.hour, scheduled.minute),
        time_until_minutes=candidate.until_minutes,
        time_until_seconds=candidate.until_seconds,
        region=definition.region,
        impact=definition.impact,
    )


# -------- public selection API --------------------------------------------------


def candidates(definitions: Sequence[EventDefinition], now: datetime) -> list[_Candidate]:
    """Schedulable candidates in catalog order; disabled definitions are skipped."""
    now = ensure_utc(now)
    found: list[_Candidate] = []
    for index, definition in enumerate(definitions):
        if not definition.is_active:
            continue
        until = _time_until(definition, now)
        if until is None:
            continue
        found.append(
            _Candidate(
                index=index,
                definition=definition,
                until_minutes=until[0],
                until_seconds=until[1],
            )
        )
    return found


def _later_than(found: Iterable[_Candidate], current: NextOccurrence) -> list[_Candidate]:
    return sorted(
        (c for c in found if c.until_seconds > current.time_until_seconds),
        key=lambda c: c.sort_key,
    )


def _materialize(
    candidate: _Candidate, category: EventCategory, zone_name: str, now: datetime
) -> NextOccurrence:
    return _to_occurrence(candidate.definition, candidate, category, zone_name, now)


def next_occurrence(
    definitions: Sequence[EventDefinition],
    now: datetime,
    zone_name: str = "UTC",
    category: EventCategory = EventCategory.MACRO,
) -> Optional[NextOccurrence]:
    """The soonest occurrence, or None for an empty category."""
    now = ensure_utc(now)
    found = candidates(definitions, now)
    if not found:
        return None
    best = min(found, key=lambda c: c.sort_key)
    return _materialize(best, category, zone_name, now)


def next_after(
    current: Optional[NextOccurrence],
    definitions: Sequence[EventDefinition],
    now: datetime,
    zone_name: str = "UTC",
    category: Optional[EventCategory] = None,
) -> Optional[NextOccurrence]:
    """The soonest occurrence strictly later than ``current``."""
    if current is None:
        return None
    now = ensure_utc(now)
    later = _later_than(candidates(definitions, now), current)
    if not later:
        return None
    return _materialize(later[0], category or current.category, zone_name, now)


def lookahead(
    current: Optional[NextOccurrence],
    definitions: Sequence[EventDefinition],
    now: datetime,
    zone_name: str = "UTC",
    limit: int = DEFAULT_LOOKAHEAD_LIMIT,
    category: Optional[EventCategory] = None,
) -> list[NextOccurrence]:
    """Occurrences strictly later than ``current``, ascending, at most ``limit``."""
    if current is None or limit <= 0:
        return []
    now = ensure_utc(now)
    later = _later_than(candidates(definitions, now), current)[:limit]
    return [_materialize(c, category or current.category, zone_name, now) for c in later]


def select(
    definitions: Sequence[EventDefinition],
    now: datetime,
    zone_name: str = "UTC",
    category: EventCategory = EventCategory.MACRO,
    limit: int = DEFAULT_LOOKAHEAD_LIMIT,
) -> CategorySelection:
    """Next, next-after and lookahead for one category in a single pass."""
    now = ensure_utc(now)
    ordered = sorted(candidates(definitions, now), key=lambda c: c.sort_key)
    if not ordered:
        return CategorySelection(category=category)

    head, rest = ordered[0], ordered[1:]
    later = [c for c in rest if c.until_seconds > head.until_seconds]

    return CategorySelection(
        category=category,
        next=_materialize(head, category, zone_name, now),
        next_after=_materialize(later[0], category, zone_name, now) if later else None,
        lookahead=tuple(_materialize(c, category, zone_name, now) for c in later[: max(limit, 0)]),
    )
