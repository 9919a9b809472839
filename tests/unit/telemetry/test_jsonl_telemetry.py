import json
from datetime import datetime, timezone

from tradetime.adapters.clock import FixedClock
from tradetime.adapters.telemetry.jsonl import JsonlTelemetry


def _read_records(path):
    content = path.read_text(encoding="utf-8").strip()
    assert content, "expected telemetry sink to contain at least one record"
    return [json.loads(line) for line in content.splitlines()]


def test_jsonl_telemetry_writes_one_record_per_line(tmp_path):
    sink = tmp_path / "events.log.jsonl"
    clock = FixedClock(datetime(2026, 7, 15, 9, 40, tzinfo=timezone.utc))
    telemetry = JsonlTelemetry(session_id="s-1", sink_path=sink, clock=clock)

    telemetry.log("config_resolved", config_keys_total=3)
    telemetry.log("cli_invocation", command="next")

    first, second = _read_records(sink)
    assert first["event"] == "config_resolved"
    assert first["session_id"] == "s-1"
    assert first["component"] == "tradetime"
    assert first["config_keys_total"] == 3
    assert first["ts_utc"] == "2026-07-15T09:40:00+00:00"
    assert second["command"] == "next"


def test_keys_are_sorted_and_component_overridable(tmp_path):
    sink = tmp_path / "nested" / "events.jsonl"
    telemetry = JsonlTelemetry(session_id="s-2", sink_path=str(sink))

    telemetry.log("engine_diagnostic", component="news", zeta=1, alpha=2)

    raw = sink.read_text(encoding="utf-8").strip()
    keys = list(json.loads(raw).keys())
    assert keys == sorted(keys)
    record = json.loads(raw)
    assert record["component"] == "news"
    assert record["ts_utc"] is None


def test_non_json_values_are_stringified(tmp_path):
    sink = tmp_path / "events.jsonl"
    telemetry = JsonlTelemetry(session_id="s-3", sink_path=sink)
    telemetry.log("odd", path=tmp_path, zones={"UTC"})
    (record,) = _read_records(sink)
    assert record["path"] == str(tmp_path)
