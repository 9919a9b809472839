"""tt CLI entrypoint.

Subcommands: next, timeline, status, watch.

Resolves the configuration (defaults -> --config TOML -> --set/--tz overrides),
computes a dashboard snapshot and prints it. ``--at`` pins the clock to a fixed
instant, which makes every subcommand deterministic.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, TextIO

from tradetime.adapters.catalog_provider import FileCatalogProvider, StaticCatalogProvider
from tradetime.adapters.clock import FixedClock, SystemClock
from tradetime.adapters.telemetry.jsonl import JsonlTelemetry
from tradetime.adapters.telemetry.log import LoggingTelemetry
from tradetime.config.config_loader import ConfigLoader
from tradetime.config.config_resolver import ConfigResolver
from tradetime.config.models import DisplayConfig
from tradetime.core.ticker import SleepFn, Ticker
from tradetime.ports.catalog_provider import CatalogProvider
from tradetime.ports.clock import Clock
from tradetime.ports.telemetry import Telemetry
from tradetime.schedule.countdown import format_detailed, format_duration, format_smart
from tradetime.schedule.engine import DashboardSnapshot, ScheduleEngine
from tradetime.schedule.errors import InstantParseError, ScheduleError
from tradetime.schedule.selector import parse_instant
from tradetime.schedule.timeline import build_timeline
from tradetime.schedule.types import (
    BlockType,
    Catalog,
    ClockTime,
    EventCategory,
    NextOccurrence,
)
from tradetime.utils.utility import insert_path

APP_VERSION = "0.1.0"

_CATEGORY_LABELS: dict[EventCategory, str] = {
    EventCategory.MACRO: "Macro",
    EventCategory.KILLZONE: "Killzone",
    EventCategory.MARKET_SESSION: "Session",
    EventCategory.NEWS: "News",
}


def build_parser() -> argparse.ArgumentParser:
    """
    Return the top-level CLI argument parser.
    """
    p = argparse.ArgumentParser(prog="tt")
    p.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    sub = p.add_subparsers(dest="command", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        """Add arguments shared across all subcommands."""
        sp.add_argument("--config", type=Path, required=False, help="Path to a TOML catalog")
        sp.add_argument(
            "--set",
            dest="config_overrides",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Override a config entry (may be repeated)",
        )
        sp.add_argument("--tz", dest="timezone", help="Viewer IANA timezone")
        sp.add_argument("--at", dest="at", help="Pin the clock to an ISO-8601 instant")
        sp.add_argument(
            "--show-seconds", action="store_true", help="Render seconds in clocks and countdowns"
        )
        sp.add_argument("--telemetry", type=Path, help="Append telemetry events to this JSONL file")
        sp.add_argument(
            "--log-level",
            default="WARNING",
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            help="Logging level",
        )

    add_common(sub.add_parser("next", help="Next, next-after and lookahead per category"))
    add_common(sub.add_parser("timeline", help="The UTC day as contiguous blocks"))
    add_common(sub.add_parser("status", help="Traffic-light trading status and clocks"))

    watch = sub.add_parser("watch", help="Re-render the status every tick")
    add_common(watch)
    watch.add_argument("--ticks", type=int, default=None, help="Stop after N ticks")
    watch.add_argument("--interval", default="1s", help="Tick interval, e.g. 1s, 500ms")
    return p


def _parse_cli_overrides(pairs: list[str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    for item in pairs:
        key, sep, value = item.partition("=")
        if sep == "":
            raise ValueError(f"--set requires KEY=VALUE format (got {item!r})")

        insert_path(overrides, key, value)
    return overrides


def _collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides = _parse_cli_overrides(args.config_overrides or [])
    if args.timezone:
        insert_path(overrides, "timezone", args.timezone)
    if args.show_seconds:
        insert_path(overrides, "display.show_seconds", True)
    return overrides


def _build_clock(at: Optional[str]) -> Clock:
    if at is None:
        return SystemClock()
    return FixedClock(parse_instant(at))


def _build_telemetry(path: Optional[Path], clock: Clock) -> Telemetry:
    if path is None:
        return LoggingTelemetry()
    return JsonlTelemetry(session_id=str(uuid.uuid4()), sink_path=path, clock=clock)


# -------- rendering -----------------------------------------------------------


def _occurrence_line(occ: NextOccurrence, zone: str, show_seconds: bool) -> str:
    countdown = format_detailed(occ.time_until_seconds / 60.0, show_seconds)
    flag = " !" if countdown.is_urgent else (" *" if countdown.is_soon else "")
    return f"{occ.name} @ {occ.start_time} {zone} (in {countdown.display}){flag}"


def render_next(snapshot: DashboardSnapshot, show_seconds: bool = False) -> list[str]:
    zone = snapshot.viewer_timezone
    lines: list[str] = []
    for category, label in _CATEGORY_LABELS.items():
        selection = snapshot.selection(category)
        if selection.next is None:
            lines.append(f"{label}: none scheduled")
            continue
        lines.append(f"{label}: {_occurrence_line(selection.next, zone, show_seconds)}")
        if selection.next_after is not None:
            lines.append(f"  then {_occurrence_line(selection.next_after, zone, show_seconds)}")
        for occ in selection.lookahead[1:]:
            lines.append(f"  later {_occurrence_line(occ, zone, show_seconds)}")
    for diag in snapshot.diagnostics:
        lines.append(f"warning: {diag.component} failed ({diag.error_type}: {diag.message})")
    return lines


def render_timeline(catalog: Catalog) -> list[str]:
    lines: list[str] = []
    for block in build_timeline(catalog):
        start = ClockTime(block.start_hour, block.start_minute)
        end = f"{block.end_hour:02d}:{block.end_minute:02d}"
        duration = format_duration(start, ClockTime.from_minutes(block.end_minutes))
        marker = "  " if block.type == BlockType.INACTIVE else "##"
        lines.append(f"{marker} {start}-{end} UTC  {block.type.value:<12} {block.name} ({duration})")
    return lines


def render_status(snapshot: DashboardSnapshot, show_seconds: bool = False) -> list[str]:
    lines: list[str] = []
    if snapshot.status is not None:
        lines.append(f"[{snapshot.status.status.value.upper()}] {snapshot.status.period}")
    for active in snapshot.active:
        left = format_detailed(active.time_left_seconds / 60.0, show_seconds)
        lines.append(f"active: {active.window.name} ({left.display} left)")
    for news in snapshot.news:
        lines.append(f"news: {news.instance.name} [{news.phase.value}]")
    for clock in snapshot.clocks:
        t = clock.time
        shown = format_smart(t.hours, t.minutes, t.seconds, show_seconds)
        lines.append(f"{clock.zone:<20} {shown} {clock.abbreviation} {clock.offset} {clock.date}")
    return lines


def _emit(lines: list[str], out: TextIO) -> None:
    for line in lines:
        print(line, file=out)


# -------- commands ------------------------------------------------------------


def run_command(
    args: argparse.Namespace,
    clock: Clock,
    telemetry: Telemetry,
    out: Optional[TextIO] = None,
) -> int:
    """Resolve configuration, then dispatch ``args.command``."""
    out = out or sys.stdout
    resolver = ConfigResolver(telemetry)
    overrides: Mapping[str, Any] = _collect_overrides(args)

    provider: CatalogProvider
    if args.config is not None:
        file_provider = FileCatalogProvider(args.config, resolver, ConfigLoader(), overrides)
        display: DisplayConfig = file_provider.current().config.display
        provider = file_provider
    else:
        resolved = resolver.resolve(cli_overrides=overrides)
        display = resolved.config.display
        provider = StaticCatalogProvider(resolved.config.to_catalog())

    engine = ScheduleEngine(telemetry)
    telemetry.log("cli_invocation", command=args.command)

    if args.command == "timeline":
        _emit(render_timeline(provider.get_catalog()), out)
        return 0

    if args.command in ("next", "status"):
        snapshot = engine.snapshot(provider.get_catalog(), clock.now(), display)
        if args.command == "next":
            _emit(render_next(snapshot, display.show_seconds), out)
        else:
            _emit(render_status(snapshot, display.show_seconds), out)
        return 0

    if args.command == "watch":
        return run_watch(engine, provider, clock, display, args.interval, args.ticks, out)

    print(f"Unknown command '{args.command}'", file=sys.stderr)
    return 2


def run_watch(
    engine: ScheduleEngine,
    provider: CatalogProvider,
    clock: Clock,
    display: DisplayConfig,
    interval: str,
    max_ticks: Optional[int],
    out: Optional[TextIO] = None,
) -> int:
    """Print one status line per tick. A pinned clock is advanced instead of slept."""
    out = out or sys.stdout

    sleep: Optional[SleepFn] = None
    if isinstance(clock, FixedClock):
        fixed = clock

        async def _advance(seconds: float) -> None:
            fixed.advance(seconds)

        sleep = _advance

    ticker = Ticker(clock, interval, sleep=sleep)

    def on_tick(instant: datetime) -> None:
        snapshot = engine.snapshot(provider.get_catalog(), instant, display)
        status = snapshot.status
        head = f"[{status.status.value.upper()}] {status.period}" if status else "[?]"
        nxt = snapshot.selection(EventCategory.MACRO).next
        tail = ""
        if nxt is not None:
            countdown = format_detailed(nxt.time_until_seconds / 60.0, display.show_seconds)
            tail = f" | next macro {nxt.name} in {countdown.display}"
        print(f"{instant:%H:%M:%S} {head}{tail}", file=out)

    try:
        asyncio.run(ticker.run(on_tick, max_ticks))
    except KeyboardInterrupt:
        ticker.stop()
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint wrapper compatible with setuptools scripts."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        clock = _build_clock(args.at)
    except InstantParseError as exc:
        print(f"Invalid --at value: {exc}", file=sys.stderr)
        return 2

    telemetry = _build_telemetry(args.telemetry, clock)
    try:
        return run_command(args, clock, telemetry)
    except (ScheduleError, FileNotFoundError, ValueError) as exc:
        telemetry.log("cli_error", command=args.command, error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
