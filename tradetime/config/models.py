from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tradetime.schedule.types import (
    Catalog,
    ClockTime,
    Impact,
    NewsTemplate,
    Probability,
    RecurringWindow,
    ScheduledInstant,
    SessionType,
)


class ClockTimeModel(BaseModel):
    """UTC time-of-day; TOML may also spell it as "HH:MM"."""

    model_config = ConfigDict(extra="forbid")
    hours: int = Field(ge=0, le=23, description="hour of day (UTC)")
    minutes: int = Field(ge=0, le=59, description="minute of hour")

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            hours, sep, minutes = data.strip().partition(":")
            if not sep:
                raise ValueError(f"expected HH:MM, got {data!r}")
            return {"hours": int(hours), "minutes": int(minutes)}
        return data

    def to_clock_time(self) -> ClockTime:
        return ClockTime(self.hours, self.minutes)


class WindowModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str = Field(min_length=1, description="stable identifier, unique per category")
    name: str = Field(description="display name")
    start: ClockTimeModel
    end: ClockTimeModel
    region: str | None = None
    description: str | None = None
    impact: Impact | None = None
    probability: Probability | None = None
    session_type: SessionType | None = Field(
        default=None, description="market sessions only: premarket, market-open, lunch, ..."
    )
    is_active: bool = True

    def to_window(self) -> RecurringWindow:
        return RecurringWindow(
            id=self.id,
            name=self.name,
            start=self.start.to_clock_time(),
            end=self.end.to_clock_time(),
            region=self.region,
            description=self.description,
            impact=self.impact,
            probability=self.probability,
            session_type=self.session_type,
            is_active=self.is_active,
        )


class NewsTemplateModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str = Field(min_length=1)
    name: str
    impact: Impact = Impact.MEDIUM
    countdown_minutes: int = Field(default=5, ge=0, description="countdown lead time")
    cooldown_minutes: int = Field(default=15, ge=0, description="shown this long after release")
    description: str | None = None

    def to_template(self) -> NewsTemplate:
        return NewsTemplate(
            id=self.id,
            name=self.name,
            impact=self.impact,
            countdown_minutes=self.countdown_minutes,
            cooldown_minutes=self.cooldown_minutes,
            description=self.description,
        )


class NewsInstanceModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str = Field(min_length=1)
    template_id: str
    name: str
    # kept raw: a malformed instant is excluded at selection time, not rejected here
    scheduled_time: datetime | str
    impact: Impact = Impact.MEDIUM
    is_active: bool = True
    description: str | None = None
    region: str | None = None

    def to_instance(self) -> ScheduledInstant:
        return ScheduledInstant(
            id=self.id,
            template_id=self.template_id,
            name=self.name,
            scheduled_time=self.scheduled_time,
            impact=self.impact,
            is_active=self.is_active,
            description=self.description,
            region=self.region,
        )


class DisplayConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    show_seconds: bool = Field(default=False, description="render seconds in clocks and countdowns")
    lookahead_limit: int = Field(default=4, ge=0, description="upcoming entries per category")
    reference_zones: list[str] = Field(
        default=["UTC", "America/New_York", "Europe/London", "Asia/Tokyo"],
        description="zones shown as reference clocks",
    )


class Config(BaseModel):
    model_config = ConfigDict(extra="forbid")
    timezone: str = Field(default="UTC", description="viewer IANA zone")
    display: DisplayConfig = Field(default_factory=DisplayConfig, description="Display options")
    macros: list[WindowModel] = Field(default_factory=list)
    killzones: list[WindowModel] = Field(default_factory=list)
    market_sessions: list[WindowModel] = Field(default_factory=list)
    news_templates: list[NewsTemplateModel] = Field(default_factory=list)
    news_instances: list[NewsInstanceModel] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def _strip_zone(cls, value: str) -> str:
        return value.strip() or "UTC"

    @model_validator(mode="after")
    def _unique_ids(self) -> "Config":
        sections: dict[str, list[Any]] = {
            "macros": self.macros,
            "killzones": self.killzones,
            "market_sessions": self.market_sessions,
            "news_templates": self.news_templates,
            "news_instances": self.news_instances,
        }
        for section, entries in sections.items():
            seen: set[str] = set()
            for entry in entries:
                if entry.id in seen:
                    raise ValueError(f"duplicate id {entry.id!r} in {section}")
                seen.add(entry.id)
        return self

    def to_catalog(self) -> Catalog:
        return Catalog(
            macros=tuple(w.to_window() for w in self.macros),
            killzones=tuple(w.to_window() for w in self.killzones),
            market_sessions=tuple(w.to_window() for w in self.market_sessions),
            news_instances=tuple(n.to_instance() for n in self.news_instances),
            news_templates=tuple(t.to_template() for t in self.news_templates),
            viewer_timezone=self.timezone,
        )


@dataclass(frozen=True)
class ReturnConfig:
    config: Config
    internal_config: Mapping[str, Any]
    config_hash: str
    config_keys_total: int
