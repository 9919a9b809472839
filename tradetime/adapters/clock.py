"""Clock adapters for the Clock port."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


class SystemClock:
    """Clock adapter that returns the current UTC time."""

    def now(self) -> datetime:
        """Return the current UTC timestamp."""
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Deterministic clock pinned to one instant (``--at``, tests).

    ``advance`` moves it forward, so a ticker loop can be replayed step by step.
    """

    def __init__(self, at: datetime) -> None:
        if at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)
        self._now = at.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        self._now = self._now + timedelta(seconds=seconds)
        return self._now
