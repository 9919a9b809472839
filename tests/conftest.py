from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

import pytest

from tradetime.config.defaults import DEFAULT_CONFIG
from tradetime.config.models import Config
from tradetime.schedule.types import (
    Catalog,
    ClockTime,
    NewsTemplate,
    RecurringWindow,
    ScheduledInstant,
    SessionType,
)


@dataclass
class StubTelemetry:
    events: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)

    def log(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]


def make_window(
    id: str,
    start: str,
    end: str,
    *,
    name: str | None = None,
    session_type: SessionType | None = None,
    is_active: bool = True,
) -> RecurringWindow:
    sh, sm = (int(x) for x in start.split(":"))
    eh, em = (int(x) for x in end.split(":"))
    return RecurringWindow(
        id=id,
        name=name or id,
        start=ClockTime(sh, sm),
        end=ClockTime(eh, em),
        session_type=session_type,
        is_active=is_active,
    )


@pytest.fixture
def telemetry() -> StubTelemetry:
    return StubTelemetry()


@pytest.fixture
def window() -> Callable[..., RecurringWindow]:
    return make_window


@pytest.fixture
def default_catalog() -> Catalog:
    return Config(**DEFAULT_CONFIG).to_catalog()


@pytest.fixture
def news_template() -> NewsTemplate:
    return NewsTemplate(id="cpi", name="Consumer Price Index", countdown_minutes=5, cooldown_minutes=15)


@pytest.fixture
def news_instance() -> Callable[..., ScheduledInstant]:
    def _make(id: str, scheduled: Any, template_id: str = "cpi", **kwargs: Any) -> ScheduledInstant:
        return ScheduledInstant(
            id=id,
            template_id=template_id,
            name=kwargs.pop("name", id),
            scheduled_time=scheduled,
            **kwargs,
        )

    return _make
