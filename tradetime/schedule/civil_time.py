"""
Civil-time conversion between UTC clock times and IANA zones.

All offsets come from ``zoneinfo.ZoneInfo.utcoffset`` evaluated at an explicit
reference instant. The public helpers never raise on a bad zone name: they log a
``timezone_fallback`` warning and degrade to UTC. Only ``utc_offset_minutes`` and
``resolve_zone`` raise ``TimezoneResolutionError``.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tradetime.ports.clock import Clock
from tradetime.schedule.errors import TimezoneResolutionError
from tradetime.schedule.types import MINUTES_PER_DAY, ClockTime, TimeInfo

logger = logging.getLogger(__name__)

_UTC_NAMES = frozenset({"UTC", "Etc/UTC", "Z", "GMT", "Etc/GMT", "UTC0"})


def _reference(at: Optional[datetime]) -> datetime:
    if at is None:
        return datetime.now(timezone.utc)
    if at.tzinfo is None:
        return at.replace(tzinfo=timezone.utc)
    return at


def _fallback(zone_name: str, operation: str, exc: Exception) -> None:
    logger.warning(
        "timezone_fallback",
        extra={
            "event": "timezone_fallback",
            "zone_name": zone_name,
            "operation": operation,
            "error": str(exc),
        },
    )


def resolve_zone(zone_name: str) -> tzinfo:
    """
    Resolve a zone name into a tzinfo.

    Raises TimezoneResolutionError for unknown or malformed identifiers.
    """
    if not isinstance(zone_name, str) or not zone_name.strip():
        raise TimezoneResolutionError("Empty timezone identifier", zone_name=str(zone_name))
    name = zone_name.strip()
    if name in _UTC_NAMES:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise TimezoneResolutionError(
            f"Invalid timezone identifier: {name!r}", zone_name=name
        ) from exc


def is_valid_zone(zone_name: Optional[str]) -> bool:
    if zone_name is None:
        return False
    try:
        resolve_zone(zone_name)
    except TimezoneResolutionError:
        return False
    return True


def utc_offset_minutes(zone_name: str, at: Optional[datetime] = None) -> int:
    """UTC offset of ``zone_name`` in minutes at the instant ``at`` (DST included)."""
    tz = resolve_zone(zone_name)
    offset = _reference(at).astimezone(tz).utcoffset()
    if offset is None:
        return 0
    return int(offset.total_seconds() // 60)


def to_zone(
    utc_hours: int, utc_minutes: int, zone_name: str, at: Optional[datetime] = None
) -> TimeInfo:
    """
    Convert a UTC clock time into the civil time of ``zone_name``.

    The zone's offset is taken as of ``at`` (default: now). On an unresolvable zone,
    the input is returned unchanged (read as UTC).
    """
    try:
        offset = utc_offset_minutes(zone_name, at)
    except TimezoneResolutionError as exc:
        _fallback(zone_name, "to_zone", exc)
        offset = 0
    local = ClockTime.from_minutes(utc_hours * 60 + utc_minutes + offset)
    return TimeInfo(hours=local.hours, minutes=local.minutes, seconds=0)


def to_utc(
    local_hours: int, local_minutes: int, zone_name: str, at: Optional[datetime] = None
) -> ClockTime:
    """Inverse of ``to_zone``, used by settings editors."""
    try:
        offset = utc_offset_minutes(zone_name, at)
    except TimezoneResolutionError as exc:
        _fallback(zone_name, "to_utc", exc)
        offset = 0
    return ClockTime.from_minutes(local_hours * 60 + local_minutes - offset)


def instant_in_zone(instant: datetime, zone_name: str) -> TimeInfo:
    """Civil time of an absolute instant in ``zone_name`` (UTC on failure)."""
    instant = _reference(instant)
    try:
        tz = resolve_zone(zone_name)
    except TimezoneResolutionError as exc:
        _fallback(zone_name, "instant_in_zone", exc)
        tz = timezone.utc
    try:
        local = instant.astimezone(tz)
    except OverflowError:
        # next to datetime.min/max: shift the time of day only
        offset = tz.utcoffset(instant.replace(tzinfo=None))
        shift = int(offset.total_seconds()) if offset is not None else 0
        utc = instant.astimezone(timezone.utc)
        total = (utc.hour * 3600 + utc.minute * 60 + utc.second + shift) % 86400
        return TimeInfo(hours=total // 3600, minutes=total % 3600 // 60, seconds=total % 60)
    return TimeInfo(hours=local.hour, minutes=local.minute, seconds=local.second)


def now(zone_name: str, clock: Optional[Clock] = None) -> TimeInfo:
    """Current civil time in ``zone_name``."""
    current = clock.now() if clock is not None else datetime.now(timezone.utc)
    return instant_in_zone(current, zone_name)


def _gmt_label(offset_minutes: int) -> str:
    if offset_minutes == 0:
        return "GMT"
    sign = "+" if offset_minutes > 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    if minutes:
        return f"GMT{sign}{hours}:{minutes:02d}"
    return f"GMT{sign}{hours}"


def zone_abbreviation(zone_name: str, at: Optional[datetime] = None) -> str:
    """
    Best-effort short label such as "UTC", "EEST" or "GMT+3".

    Zones the database only labels numerically ("+03") get a GMT-style label.
    Returns an empty string on failure.
    """
    try:
        tz = resolve_zone(zone_name)
    except TimezoneResolutionError:
        return ""
    if tz is timezone.utc:
        return "UTC"
    local = _reference(at).astimezone(tz)
    abbreviation = local.tzname() or ""
    if not abbreviation or abbreviation[0] in "+-":
        offset = local.utcoffset()
        if offset is None:
            return ""
        return _gmt_label(int(offset.total_seconds() // 60))
    return abbreviation


def offset_label(zone_name: str, at: Optional[datetime] = None) -> str:
    """Offset as "UTC+03:00"; "UTC+00:00" when the zone cannot be resolved."""
    try:
        offset = utc_offset_minutes(zone_name, at)
    except TimezoneResolutionError as exc:
        _fallback(zone_name, "offset_label", exc)
        offset = 0
    sign = "+" if offset >= 0 else "-"
    hours, minutes = divmod(abs(offset), 60)
    return f"UTC{sign}{hours:02d}:{minutes:02d}"


def format_date(zone_name: str, at: Optional[datetime] = None) -> str:
    """Calendar date in the zone, e.g. "Oct 19, 2026"."""
    instant = _reference(at)
    try:
        local = instant.astimezone(resolve_zone(zone_name))
    except TimezoneResolutionError as exc:
        _fallback(zone_name, "format_date", exc)
        local = instant.astimezone(timezone.utc)
    return f"{local:%b} {local.day}, {local.year}"


def resolve_viewer_timezone(preferred: Optional[str] = None) -> str:
    """
    Pick the viewer zone: ``preferred`` if valid, then ``$TZ`` if valid, else "UTC".
    """
    for candidate in (preferred, os.environ.get("TZ")):
        if candidate and is_valid_zone(candidate):
            return candidate.strip()
    if preferred:
        logger.warning(
            "timezone_fallback",
            extra={"event": "timezone_fallback", "zone_name": preferred, "operation": "resolve"},
        )
    return "UTC"


def minutes_of_day(instant: datetime) -> int:
    """UTC minutes-of-day of an instant, in [0, 1440)."""
    utc = _reference(instant).astimezone(timezone.utc)
    return (utc.hour * 60 + utc.minute) % MINUTES_PER_DAY
