from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tradetime.schedule.news import (
    active_news,
    create_news_instance,
    default_news_templates,
    news_phase,
    upcoming_news,
)
from tradetime.schedule.types import Impact, NewsPhase, NewsTemplate

RELEASE = datetime(2026, 7, 15, 12, 0, tzinfo=timezone.utc)


class TestNewsPhase:
    @pytest.mark.parametrize(
        "offset, expected",
        [
            (timedelta(minutes=-6), None),
            (timedelta(minutes=-5), NewsPhase.COUNTDOWN),
            (timedelta(minutes=-1), NewsPhase.COUNTDOWN),
            (timedelta(seconds=0), NewsPhase.HAPPENING),
            (timedelta(seconds=60), NewsPhase.HAPPENING),
            (timedelta(seconds=61), NewsPhase.COOLDOWN),
            (timedelta(minutes=15), NewsPhase.COOLDOWN),
            (timedelta(minutes=16), None),
        ],
    )
    def test_phases(self, news_instance, news_template, offset, expected) -> None:
        instance = news_instance("cpi-1", RELEASE)
        assert news_phase(instance, news_template, RELEASE + offset) is expected

    def test_unparsable_instant_has_no_phase(self, news_instance, news_template) -> None:
        assert news_phase(news_instance("bad", "garbage"), news_template, RELEASE) is None


class TestCollections:
    def test_active_news_sorted_and_filtered(self, news_instance, news_template) -> None:
        instances = [
            news_instance("later", RELEASE + timedelta(minutes=3)),
            news_instance("now", RELEASE),
            news_instance("off", RELEASE, is_active=False),
            news_instance("orphan", RELEASE, template_id="missing"),
            news_instance("far", RELEASE + timedelta(hours=2)),
        ]
        found = active_news(instances, [news_template], RELEASE)
        assert [a.instance.id for a in found] == ["now", "later"]
        assert [a.phase for a in found] == [NewsPhase.HAPPENING, NewsPhase.COUNTDOWN]

    def test_upcoming_excludes_started_countdowns(self, news_instance, news_template) -> None:
        instances = [
            news_instance("in-countdown", RELEASE + timedelta(minutes=4)),
            news_instance("b", RELEASE + timedelta(hours=2)),
            news_instance("a", RELEASE + timedelta(hours=1)),
            news_instance("past", RELEASE - timedelta(hours=1)),
        ]
        found = upcoming_news(instances, [news_template], RELEASE)
        assert [i.id for i in found] == ["a", "b"]

    def test_instants_at_datetime_bounds(self, news_instance, news_template) -> None:
        instances = [
            news_instance("max", "9999-12-31T23:59:59Z"),
            news_instance("min", "0001-01-01T00:00:00Z"),
        ]
        assert active_news(instances, [news_template], RELEASE) == []
        assert [i.id for i in upcoming_news(instances, [news_template], RELEASE)] == ["max"]

    def test_upcoming_is_limited(self, news_instance, news_template) -> None:
        instances = [news_instance(f"n{i}", RELEASE + timedelta(hours=i + 1)) for i in range(12)]
        assert len(upcoming_news(instances, [news_template], RELEASE)) == 10
        assert len(upcoming_news(instances, [news_template], RELEASE, limit=3)) == 3


class TestTemplates:
    def test_default_templates(self) -> None:
        templates = default_news_templates()
        assert [t.id for t in templates] == ["nfp", "fomc", "cpi", "gdp", "retail_sales", "ecb_rate"]
        assert all(t.countdown_minutes == 5 and t.cooldown_minutes == 15 for t in templates)

    def test_create_instance_inherits_impact(self) -> None:
        template = NewsTemplate(id="nfp", name="Non-Farm Payrolls", impact=Impact.HIGH)
        instance = create_news_instance(template, RELEASE)
        assert instance.id.startswith("nfp_")
        assert instance.template_id == "nfp"
        assert instance.name == "Non-Farm Payrolls"
        assert instance.impact == Impact.HIGH
        assert instance.scheduled_time == RELEASE

    def test_negative_durations_rejected(self) -> None:
        from tradetime.schedule.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            NewsTemplate(id="x", name="x", countdown_minutes=-1)
