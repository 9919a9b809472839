from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from tradetime.schedule.status import OUTSIDE_HOURS, trading_status
from tradetime.schedule.types import Catalog, SessionType, TradingStatus


def _utc(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 7, 15, hour, minute, tzinfo=timezone.utc)


class TestTradingStatus:
    @pytest.mark.parametrize(
        "hour, minute, status, period",
        [
            (9, 40, TradingStatus.GREEN, "London Session 1"),
            (7, 30, TradingStatus.GREEN, "London KZ"),
            (18, 30, TradingStatus.RED, "Lunch"),
            # lunch starts before the midday macro, so it is matched first
            (18, 55, TradingStatus.RED, "Lunch"),
            (3, 0, TradingStatus.RED, OUTSIDE_HOURS),
        ],
    )
    def test_default_catalog(self, default_catalog, hour, minute, status, period) -> None:
        info = trading_status(_utc(hour, minute), default_catalog)
        assert info.status == status
        assert info.period == period

    def test_premarket_is_amber(self, window) -> None:
        catalog = Catalog(
            market_sessions=(
                window("pre", "07:00", "09:30", name="Pre-Market", session_type=SessionType.PREMARKET),
            )
        )
        info = trading_status(_utc(8), catalog)
        assert info.status == TradingStatus.AMBER
        assert info.period == "Pre-Market"

    def test_upcoming_news_warns(self, default_catalog, news_instance) -> None:
        now = _utc(3)
        soon = replace(default_catalog, news_instances=(news_instance("cpi-1", now + timedelta(minutes=20), name="CPI"),))
        info = trading_status(now, soon)
        assert info.status == TradingStatus.AMBER
        assert "CPI" in info.period

        edge = replace(
            default_catalog,
            news_instances=(
                news_instance("max", "9999-12-31T23:59:59Z"),
                news_instance("far", "9999-12-31T23:59:59-05:00"),
            ),
        )
        assert trading_status(now, edge).period == OUTSIDE_HOURS

        later = replace(default_catalog, news_instances=(news_instance("cpi-1", now + timedelta(minutes=40)),))
        assert trading_status(now, later).period == OUTSIDE_HOURS
