from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

from tradetime.adapters.clock import FixedClock
from tradetime.schedule import civil_time
from tradetime.schedule.errors import TimezoneResolutionError
from tradetime.schedule.types import ClockTime

SUMMER = datetime(2026, 7, 15, 12, 0, tzinfo=timezone.utc)
WINTER = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class TestOffsets:
    def test_fixed_and_dst_offsets(self) -> None:
        assert civil_time.utc_offset_minutes("UTC", SUMMER) == 0
        assert civil_time.utc_offset_minutes("Asia/Kolkata", SUMMER) == 330
        assert civil_time.utc_offset_minutes("America/New_York", WINTER) == -300
        assert civil_time.utc_offset_minutes("America/New_York", SUMMER) == -240

    def test_unknown_zone_raises(self) -> None:
        with pytest.raises(TimezoneResolutionError) as excinfo:
            civil_time.utc_offset_minutes("Mars/Base", SUMMER)
        assert excinfo.value.zone_name == "Mars/Base"

    def test_is_valid_zone(self) -> None:
        assert civil_time.is_valid_zone("Europe/London")
        assert not civil_time.is_valid_zone("Mars/Base")
        assert not civil_time.is_valid_zone("")
        assert not civil_time.is_valid_zone(None)


class TestConversion:
    def test_beirut_summer(self) -> None:
        assert civil_time.to_zone(8, 0, "Asia/Beirut", SUMMER).clock_time() == ClockTime(11, 0)
        assert civil_time.to_zone(8, 0, "UTC", SUMMER).clock_time() == ClockTime(8, 0)

    def test_wraps_past_midnight(self) -> None:
        assert civil_time.to_zone(23, 30, "Asia/Tokyo", SUMMER).clock_time() == ClockTime(8, 30)
        assert civil_time.to_zone(2, 0, "America/New_York", SUMMER).clock_time() == ClockTime(22, 0)

    @pytest.mark.parametrize("zone", ["UTC", "Asia/Beirut", "Asia/Kolkata", "America/New_York"])
    def test_round_trip(self, zone) -> None:
        for h, m in [(0, 0), (8, 0), (13, 45), (23, 59)]:
            local = civil_time.to_zone(h, m, zone, SUMMER)
            assert civil_time.to_utc(local.hours, local.minutes, zone, SUMMER) == ClockTime(h, m)

    def test_unknown_zone_falls_back(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            info = civil_time.to_zone(8, 0, "Mars/Base", SUMMER)
        assert info.formatted == "08:00:00"
        assert any(getattr(r, "event", None) == "timezone_fallback" for r in caplog.records)

    def test_instant_in_zone_and_now(self) -> None:
        at = datetime(2026, 7, 15, 9, 40, 5, tzinfo=timezone.utc)
        assert civil_time.instant_in_zone(at, "Asia/Tokyo").formatted == "18:40:05"
        assert civil_time.now("Europe/London", FixedClock(at)).formatted == "10:40:05"


class TestLabels:
    def test_abbreviation(self) -> None:
        assert civil_time.zone_abbreviation("UTC", SUMMER) == "UTC"
        assert civil_time.zone_abbreviation("America/New_York", SUMMER) == "EDT"
        assert civil_time.zone_abbreviation("America/New_York", WINTER) == "EST"
        assert civil_time.zone_abbreviation("Asia/Dubai", SUMMER) == "GMT+4"
        assert civil_time.zone_abbreviation("Mars/Base", SUMMER) == ""

    def test_offset_label(self) -> None:
        assert civil_time.offset_label("Asia/Kolkata", SUMMER) == "UTC+05:30"
        assert civil_time.offset_label("America/New_York", WINTER) == "UTC-05:00"
        assert civil_time.offset_label("UTC", SUMMER) == "UTC+00:00"

    def test_format_date(self) -> None:
        at = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        assert civil_time.format_date("UTC", at) == "Oct 19, 2026"
        assert civil_time.format_date("Pacific/Auckland", at) == "Oct 20, 2026"


class TestViewerZone:
    def test_preferred_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("TZ", "Asia/Tokyo")
        assert civil_time.resolve_viewer_timezone("Europe/London") == "Europe/London"

    def test_environment_is_next(self, monkeypatch) -> None:
        monkeypatch.setenv("TZ", "Asia/Tokyo")
        assert civil_time.resolve_viewer_timezone(None) == "Asia/Tokyo"
        assert civil_time.resolve_viewer_timezone("Mars/Base") == "Asia/Tokyo"

    def test_utc_last(self, monkeypatch) -> None:
        monkeypatch.delenv("TZ", raising=False)
        assert civil_time.resolve_viewer_timezone("Mars/Base") == "UTC"
        assert civil_time.resolve_viewer_timezone() == "UTC"


def test_minutes_of_day() -> None:
    at = datetime(2026, 7, 15, 23, 30, tzinfo=timezone.utc)
    assert civil_time.minutes_of_day(at) == 1410
