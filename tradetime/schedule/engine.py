"""
Schedule Engine.

Computes one dashboard tick: per-category selections, active windows, live news,
the trading status and the reference-zone clocks. Each call is pure in its
inputs; the engine keeps no state between ticks, so a replaced catalog or viewer
zone takes effect on the next call.

A failure inside one category is logged, recorded in ``diagnostics`` and does
not prevent the others from being returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from tradetime.schedule import civil_time
from tradetime.schedule.active import active_windows
from tradetime.schedule.news import active_news
from tradetime.schedule.selector import DEFAULT_LOOKAHEAD_LIMIT, ensure_utc, select
from tradetime.schedule.status import trading_status
from tradetime.schedule.types import (
    ActiveNews,
    ActiveWindow,
    Catalog,
    CategorySelection,
    EventCategory,
    TimeInfo,
    TradingStatusInfo,
)

if TYPE_CHECKING:
    from tradetime.config.models import DisplayConfig
    from tradetime.ports.telemetry import Telemetry

logger = logging.getLogger(__name__)

_WINDOW_CATEGORIES = (
    EventCategory.MACRO,
    EventCategory.KILLZONE,
    EventCategory.MARKET_SESSION,
)


@dataclass(frozen=True)
class ReferenceClock:
    """Wall clock of one reference zone."""

    zone: str
    abbreviation: str
    offset: str
    time: TimeInfo
    date: str


@dataclass(frozen=True)
class Diagnostic:
    """One isolated failure inside a tick."""

    component: str
    error_type: str
    message: str


@dataclass(frozen=True)
class DashboardSnapshot:
    now: datetime
    viewer_timezone: str
    selections: dict[EventCategory, CategorySelection]
    active: tuple[ActiveWindow, ...] = field(default_factory=tuple)
    news: tuple[ActiveNews, ...] = field(default_factory=tuple)
    status: Optional[TradingStatusInfo] = None
    clocks: tuple[ReferenceClock, ...] = field(default_factory=tuple)
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    def selection(self, category: EventCategory) -> CategorySelection:
        return self.selections.get(category, CategorySelection(category=category))

    @property
    def ok(self) -> bool:
        return not self.diagnostics


class ScheduleEngine:
    """
    Stateless per-tick orchestrator.

    Example:
        >>> engine = ScheduleEngine()
        >>> snap = engine.snapshot(catalog, now=datetime.now(timezone.utc))
        >>> snap.selection(EventCategory.MACRO).next
    """

    def __init__(self, telemetry: Optional[Telemetry] = None) -> None:
        self._telemetry = telemetry

    @staticmethod
    def _viewer_zone(zone_name: str) -> str:
        # host $TZ is not consulted
        if civil_time.is_valid_zone(zone_name):
            return zone_name.strip()
        logger.warning(
            "timezone_fallback",
            extra={"event": "timezone_fallback", "zone_name": zone_name, "operation": "snapshot"},
        )
        return "UTC"

    def _record(
        self, diagnostics: list[Diagnostic], component: str, exc: Exception
    ) -> None:
        logger.exception(
            "category_failed",
            extra={"event": "category_failed", "component": component, "error": str(exc)},
        )
        diagnostics.append(
            Diagnostic(component=component, error_type=type(exc).__name__, message=str(exc))
        )
        if self._telemetry is not None:
            self._telemetry.log(
                "engine_diagnostic",
                component=component,
                error_type=type(exc).__name__,
                message=str(exc),
            )

    def snapshot(
        self,
        catalog: Catalog,
        now: datetime,
        display: Optional[DisplayConfig] = None,
    ) -> DashboardSnapshot:
        now = ensure_utc(now)
        zone = self._viewer_zone(catalog.viewer_timezone)
        limit = display.lookahead_limit if display is not None else DEFAULT_LOOKAHEAD_LIMIT
        diagnostics: list[Diagnostic] = []

        selections: dict[EventCategory, CategorySelection] = {}
        for category in EventCategory:
            try:
                selections[category] = select(
                    catalog.definitions(category), now, zone, category, limit
                )
            except Exception as exc:
                self._record(diagnostics, category.value, exc)
                selections[category] = CategorySelection(category=category)

        active: list[ActiveWindow] = []
        for category in _WINDOW_CATEGORIES:
            try:
                active.extend(active_windows(now, catalog.definitions(category), category))
            except Exception as exc:
                self._record(diagnostics, f"active.{category.value}", exc)
        active.sort(key=lambda a: a.time_left_seconds)

        news: list[ActiveNews] = []
        try:
            news = active_news(catalog.news_instances, catalog.news_templates, now)
        except Exception as exc:
            self._record(diagnostics, "news", exc)

        status: Optional[TradingStatusInfo] = None
        try:
            status = trading_status(now, catalog)
        except Exception as exc:
            self._record(diagnostics, "status", exc)

        zones = display.reference_zones if display is not None else [zone]
        clocks = tuple(self._clock(z, now) for z in zones)

        return DashboardSnapshot(
            now=now,
            viewer_timezone=zone,
            selections=selections,
            active=tuple(active),
            news=tuple(news),
            status=status,
            clocks=clocks,
            diagnostics=tuple(diagnostics),
        )

    @staticmethod
    def _clock(zone: str, now: datetime) -> ReferenceClock:
        return ReferenceClock(
            zone=zone,
            abbreviation=civil_time.zone_abbreviation(zone, now),
            offset=civil_time.offset_label(zone, now),
            time=civil_time.instant_in_zone(now, zone),
            date=civil_time.format_date(zone, now),
        )

    def describe(self, snapshot: DashboardSnapshot) -> dict[str, Any]:
        """Flat, JSON-friendly summary of a snapshot (used by telemetry and the CLI)."""
        summary: dict[str, Any] = {
            "now": snapshot.now.isoformat(),
            "viewer_timezone": snapshot.viewer_timezone,
            "status": snapshot.status.status.value if snapshot.status else None,
            "period": snapshot.status.period if snapshot.status else None,
            "active": [a.window.id for a in snapshot.active],
            "diagnostics": len(snapshot.diagnostics),
        }
        for category, selection in snapshot.selections.items():
            nxt = selection.next
            summary[f"next_{category.value}"] = nxt.source_id if nxt else None
        return summary
