from datetime import datetime, timezone

import pytest

from tradetime.adapters.clock import FixedClock
from tradetime.core.ticker import Ticker, align_forward, parse_timeframe


class TestTimeframes:
    @pytest.mark.parametrize(
        "tf, expected",
        [("1s", 1000), ("500ms", 500), ("2m", 120_000), (" 1H ", 3_600_000)],
    )
    def test_parse_timeframe(self, tf, expected):
        assert parse_timeframe(tf) == expected

    @pytest.mark.parametrize("tf", ["", "s", "0s", "-1s", "1.5s", "10x"])
    def test_parse_timeframe_rejects(self, tf):
        with pytest.raises(ValueError):
            parse_timeframe(tf)

    def test_align_forward(self):
        assert align_forward(1_250, 1_000) == 2_000
        assert align_forward(2_000, 1_000) == 2_000
        assert align_forward(1_250, 1_000, offset_ms=300) == 1_300
        with pytest.raises(ValueError):
            align_forward(1, 0)


def _fixed(second: int = 0, microsecond: int = 0) -> FixedClock:
    return FixedClock(datetime(2026, 7, 15, 12, 0, second, microsecond, tzinfo=timezone.utc))


class TestTicker:
    @pytest.mark.asyncio
    async def test_ticks_align_to_second_boundaries(self):
        clock = _fixed(microsecond=250_000)
        slept: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            slept.append(seconds)
            clock.advance(seconds)

        ticker = Ticker(clock, "1s", sleep=fake_sleep)
        instants = [t async for t in ticker.ticks(max_ticks=3)]

        assert [t.strftime("%H:%M:%S.%f") for t in instants] == [
            "12:00:00.250000",
            "12:00:01.000000",
            "12:00:02.000000",
        ]
        assert slept == [0.75, 1.0]

    @pytest.mark.asyncio
    async def test_run_delivers_to_callback_and_stops(self):
        clock = _fixed()

        async def fake_sleep(seconds: float) -> None:
            clock.advance(seconds)

        ticker = Ticker(clock, "500ms", sleep=fake_sleep)
        seen: list[datetime] = []

        def on_tick(instant: datetime) -> None:
            seen.append(instant)
            if len(seen) == 4:
                ticker.stop()

        delivered = await ticker.run(on_tick)
        assert delivered == 4
        assert (seen[-1] - seen[0]).total_seconds() == 1.5

    def test_interval_is_parsed_eagerly(self):
        with pytest.raises(ValueError):
            Ticker(_fixed(), "soon")
