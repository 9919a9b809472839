"""
Custom exceptions for the scheduling engine.

Exception hierarchy:
- ScheduleError (base)
  - TimezoneResolutionError: unknown or malformed IANA zone name
  - InstantParseError: scheduled instant that cannot be parsed
  - ConfigurationError: invalid catalog or display configuration

Zone and instant errors are recovered inside the engine (fallback to UTC,
exclusion from results). They surface to callers only through the low-level
primitives that document them.
"""

from __future__ import annotations

from typing import Any, Optional


class ScheduleError(Exception):
    """Base exception for all scheduling errors."""

    def __init__(
        self,
        message: str,
        *,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.component = component
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.component:
            parts.append(f"[component={self.component}]")
        if self.details:
            parts.append(f"[details={self.details}]")
        return " ".join(parts)


class TimezoneResolutionError(ScheduleError):
    """Raised when a zone name cannot be resolved against the tz database."""

    def __init__(
        self,
        message: str,
        *,
        zone_name: Optional[str] = None,
        component: Optional[str] = "civil_time",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.zone_name = zone_name
        details = details or {}
        if zone_name is not None:
            details["zone_name"] = zone_name
        super().__init__(message, component=component, details=details)


class InstantParseError(ScheduleError):
    """Raised when a scheduled instant is not a valid timestamp."""

    def __init__(
        self,
        message: str,
        *,
        raw_value: Any = None,
        component: Optional[str] = "selector",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.raw_value = raw_value
        details = details or {}
        if raw_value is not None:
            details["raw_value"] = repr(raw_value)
        super().__init__(message, component=component, details=details)


class ConfigurationError(ScheduleError):
    """Raised for invalid configuration values."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Any = None,
        component: Optional[str] = "config",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.field = field
        self.value = value
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, component=component, details=details)
