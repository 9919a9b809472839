"""
The ticker re-invokes the engine on a fixed grid (1 Hz by default) aligned to
wall-clock boundaries, so countdowns roll over exactly on the second. It owns no
schedule state: every tick just hands the boundary instant to a callback.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable, Final, Optional

from tradetime.ports.clock import Clock

logger = logging.getLogger(__name__)

Millis = int  # Milliseconds since epoch

SleepFn = Callable[[float], Awaitable[None]]
TickCallback = Callable[[datetime], None]

# -------- Utilities (timeframe parsing & alignment) ---------------------------

_TIME_UNITS_MS: Final[dict[str, int]] = {
    "ms": 1,
    "s": 1000,
    "m": 60_000,
    "h": 3_600_000,
}


def parse_timeframe(tf: str) -> Millis:
    """
    Parse timeframe strings like '500ms', '1s', '1m' into milliseconds.

    Valid units: ms, s, m, h. Raises ValueError for unknown units, empty or
    non-digit quantities and non-positive values.
    """
    tf = tf.strip().lower()

    # "ms" must be checked before "s" and "m"
    for u in ("ms", "s", "m", "h"):
        if tf.endswith(u):
            prefix = tf[: -len(u)].strip()
            if not prefix or not prefix.isdigit():
                raise ValueError(f"parse_timeframe(): quantity missing or not a digit: {tf!r}")
            quantity = int(prefix)
            if quantity <= 0:
                raise ValueError("parse_timeframe(): quantity must be positive")
            return quantity * _TIME_UNITS_MS[u]
    raise ValueError(f"parse_timeframe(): invalid timeframe: {tf!r}")


def align_forward(ts_ms: Millis, interval_ms: Millis, offset_ms: Millis = 0) -> Millis:
    """
    Smallest grid timestamp >= ``ts_ms``; the grid is every ``interval_ms``
    shifted by ``offset_ms``.
    """
    if interval_ms <= 0:
        raise ValueError("align_forward: interval_ms must be > 0")
    n = math.ceil((ts_ms - offset_ms) / interval_ms)
    return offset_ms + n * interval_ms


def to_millis(instant: datetime) -> Millis:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return int(instant.timestamp() * 1000)


def from_millis(ts_ms: Millis) -> datetime:
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)


# -------- Ticker --------------------------------------------------------------


class Ticker:
    """
    Async boundary-aligned trigger.

    The first tick fires immediately at the current instant; later ticks land on
    the next grid boundary strictly after the previous one.

    param clock: time source (SystemClock in production, FixedClock in tests)
    param interval: timeframe string, e.g. "1s"
    param sleep: awaitable sleep, injectable so tests can advance a fixed clock
    """

    def __init__(
        self,
        clock: Clock,
        interval: str = "1s",
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self._clock = clock
        self._interval_ms = parse_timeframe(interval)
        self._sleep: SleepFn = sleep or asyncio.sleep
        self._stopped = False

    @property
    def interval_ms(self) -> Millis:
        return self._interval_ms

    def stop(self) -> None:
        self._stopped = True

    async def ticks(self, max_ticks: Optional[int] = None) -> AsyncIterator[datetime]:
        count = 0
        previous: Optional[Millis] = None
        while not self._stopped and (max_ticks is None or count < max_ticks):
            now_ms = to_millis(self._clock.now())
            if previous is None:
                target = now_ms
            else:
                target = align_forward(max(now_ms, previous + 1), self._interval_ms)
                delay_ms = target - now_ms
                if delay_ms > 0:
                    await self._sleep(delay_ms / 1000.0)
            previous = target
            count += 1
            yield from_millis(target)

    async def run(self, callback: TickCallback, max_ticks: Optional[int] = None) -> int:
        """Invoke ``callback`` on every tick; returns the number of ticks delivered."""
        delivered = 0
        async for instant in self.ticks(max_ticks):
            callback(instant)
            delivered += 1
        logger.debug(
            "ticker_stopped",
            extra={"event": "ticker_stopped", "ticks": delivered, "interval_ms": self._interval_ms},
        )
        return delivered
