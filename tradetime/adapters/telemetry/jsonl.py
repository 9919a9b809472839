"""JSON Lines Telemetry adapter.

Implements the Telemetry port by writing structured JSON objects (one per line)
to disk, timestamped from the injected clock.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

import orjson

from tradetime.ports.clock import Clock


class JsonlTelemetry:
    def __init__(
        self,
        session_id: str,
        sink_path: Path,
        clock: Optional[Clock] = None,
        component: str = "tradetime",
    ) -> None:
        self._session_id = str(session_id)
        self._sink_path = sink_path if isinstance(sink_path, Path) else Path(sink_path)
        self._clock = clock
        self._component = component

    @property
    def sink_path(self) -> Path:
        return self._sink_path

    def log(self, event: str, **fields: Any) -> None:
        extras = dict(fields)

        # Tagging telemetry events with their subsystem (origin)
        component = extras.pop("component", self._component)

        record: dict[str, Any] = {
            "event": event,
            "ts_utc": self._clock.now().isoformat() if self._clock is not None else None,
            "session_id": self._session_id,
            "component": component,
            **extras,
        }
        self._write_record(record)

    def _write_record(self, record: Mapping[str, Any]) -> None:
        payload = orjson.dumps(record, option=orjson.OPT_SORT_KEYS, default=str)
        self._sink_path.parent.mkdir(parents=True, exist_ok=True)
        with self._sink_path.open("ab") as handle:
            handle.write(payload + b"\n")
