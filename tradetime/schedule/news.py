"""
News templates and instance phases.

A news instance is "live" from ``countdown_minutes`` before its scheduled time
until ``cooldown_minutes`` after it:

- countdown: before the scheduled instant
- happening: up to one minute after it
- cooldown:  afterwards, until the cooldown ends

Unparsable instants have no phase and are never upcoming.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Iterable, Optional

from tradetime.schedule.errors import InstantParseError
from tradetime.schedule.selector import ensure_utc, parse_instant
from tradetime.schedule.types import (
    ActiveNews,
    Impact,
    NewsPhase,
    NewsTemplate,
    ScheduledInstant,
)

logger = logging.getLogger(__name__)

HAPPENING_WINDOW = timedelta(seconds=60)
DEFAULT_UPCOMING_LIMIT = 10


def default_news_templates() -> list[NewsTemplate]:
    """Stock templates shipped with the dashboard."""
    return [
        NewsTemplate(
            id="nfp",
            name="Non-Farm Payrolls",
            impact=Impact.HIGH,
            description="Monthly employment report showing job creation in the US",
        ),
        NewsTemplate(
            id="fomc",
            name="FOMC Rate Decision",
            impact=Impact.HIGH,
            description="Federal Reserve interest rate announcement",
        ),
        NewsTemplate(
            id="cpi",
            name="Consumer Price Index",
            impact=Impact.HIGH,
            description="Inflation measure showing price changes",
        ),
        NewsTemplate(
            id="gdp",
            name="GDP Report",
            impact=Impact.MEDIUM,
            description="Quarterly economic growth report",
        ),
        NewsTemplate(
            id="retail_sales",
            name="Retail Sales",
            impact=Impact.MEDIUM,
            description="Monthly consumer spending report",
        ),
        NewsTemplate(
            id="ecb_rate",
            name="ECB Rate Decision",
            impact=Impact.HIGH,
            description="European Central Bank interest rate decision",
        ),
    ]


def create_news_instance(
    template: NewsTemplate,
    scheduled_time: datetime,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    instance_id: Optional[str] = None,
) -> ScheduledInstant:
    """New instance of ``template``; impact always comes from the template."""
    return ScheduledInstant(
        id=instance_id or f"{template.id}_{uuid.uuid4().hex[:12]}",
        template_id=template.id,
        name=name or template.name,
        scheduled_time=scheduled_time,
        impact=template.impact,
        is_active=True,
        description=description or template.description,
    )


def scheduled_at(instance: ScheduledInstant) -> Optional[datetime]:
    try:
        return parse_instant(instance.scheduled_time)
    except InstantParseError as exc:
        logger.warning(
            "instant_unparsable",
            extra={"event": "instant_unparsable", "instance_id": instance.id, "error": str(exc)},
        )
        return None


def news_phase(
    instance: ScheduledInstant, template: NewsTemplate, now: datetime
) -> Optional[NewsPhase]:
    """Phase of ``instance`` at ``now``, or None outside its live window."""
    now = ensure_utc(now)
    scheduled = scheduled_at(instance)
    if scheduled is None:
        return None

    # compare offsets, not shifted instants: scheduled +/- minutes can leave the datetime range
    since = now - scheduled
    if since < -timedelta(minutes=template.countdown_minutes):
        return None
    if since > timedelta(minutes=template.cooldown_minutes):
        return None
    if since < timedelta(0):
        return NewsPhase.COUNTDOWN
    if since <= HAPPENING_WINDOW:
        return NewsPhase.HAPPENING
    return NewsPhase.COOLDOWN


def _templates_by_id(templates: Iterable[NewsTemplate]) -> dict[str, NewsTemplate]:
    return {t.id: t for t in templates}


def active_news(
    instances: Iterable[ScheduledInstant],
    templates: Iterable[NewsTemplate],
    now: datetime,
) -> list[ActiveNews]:
    """Enabled instances in a live phase, ordered by scheduled time."""
    now = ensure_utc(now)
    by_id = _templates_by_id(templates)
    found: list[tuple[datetime, ActiveNews]] = []
    for instance in instances:
        if not instance.is_active:
            continue
        template = by_id.get(instance.template_id)
        if template is None:
            continue
        phase = news_phase(instance, template, now)
        if phase is None:
            continue
        scheduled = parse_instant(instance.scheduled_time)
        found.append((scheduled, ActiveNews(instance=instance, template=template, phase=phase)))
    found.sort(key=lambda pair: pair[0])
    return [entry for _, entry in found]


def upcoming_news(
    instances: Iterable[ScheduledInstant],
    templates: Iterable[NewsTemplate],
    now: datetime,
    limit: int = DEFAULT_UPCOMING_LIMIT,
) -> list[ScheduledInstant]:
    """Enabled instances whose countdown has not started yet, soonest first."""
    now = ensure_utc(now)
    by_id = _templates_by_id(templates)
    found: list[tuple[datetime, ScheduledInstant]] = []
    for instance in instances:
        if not instance.is_active:
            continue
        template = by_id.get(instance.template_id)
        if template is None:
            continue
        scheduled = scheduled_at(instance)
        if scheduled is None:
            continue
        if scheduled - now > timedelta(minutes=template.countdown_minutes):
            found.append((scheduled, instance))
    found.sort(key=lambda pair: pair[0])
    return [instance for _, instance in found[:limit]]
