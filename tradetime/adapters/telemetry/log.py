"""Telemetry adapter that forwards events to the standard logging tree.

Used when no JSONL sink is configured, so telemetry events still show up at
``--log-level DEBUG``.
"""

from __future__ import annotations

import logging
from typing import Any

_LOGGER = logging.getLogger(__name__)


class LoggingTelemetry:
    def __init__(self, level: int = logging.DEBUG) -> None:
        self._level = level

    def log(self, event: str, **fields: Any) -> None:
        _LOGGER.log(self._level, event, extra={"event": event, "fields": fields})
