"""Clock Port Interface.

Contract: Provides the current UTC instant to the engine. The engine never reads
the system clock for its own decisions; callers pass ``now`` explicitly.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Return current UTC time (datetime, tz-aware)."""
        ...
