"""Traffic-light trading status derived from the day timeline."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from tradetime.schedule.news import scheduled_at
from tradetime.schedule.selector import ensure_utc
from tradetime.schedule.timeline import build_timeline
from tradetime.schedule.types import (
    BlockType,
    Catalog,
    TimeBlock,
    TradingStatus,
    TradingStatusInfo,
)

NEWS_WARNING_WINDOW = timedelta(minutes=30)
OUTSIDE_HOURS = "Outside Trading Hours"

_GREEN = {BlockType.MACRO, BlockType.KILLZONE, BlockType.MARKET_OPEN}
_AMBER = {BlockType.PREMARKET, BlockType.AFTER_HOURS}
_RED = {BlockType.LUNCH}


def current_block(now: datetime, blocks: list[TimeBlock]) -> Optional[TimeBlock]:
    """First non-inactive block containing ``now``, in timeline order."""
    utc = now.astimezone(timezone.utc) if now.tzinfo else now
    minute = utc.hour * 60 + utc.minute
    for block in blocks:
        if block.type == BlockType.INACTIVE:
            continue
        if block.start_minutes <= minute < block.end_minutes:
            return block
    return None


def _news_warning(now: datetime, catalog: Catalog) -> Optional[str]:
    utc = ensure_utc(now)
    upcoming = []
    for instance in catalog.news_instances:
        if not instance.is_active:
            continue
        scheduled = scheduled_at(instance)
        if scheduled is None:
            continue
        if timedelta(0) < scheduled - utc <= NEWS_WARNING_WINDOW:
            upcoming.append((scheduled, instance.name))
    if not upcoming:
        return None
    return f"News: {min(upcoming)[1]}"


def trading_status(now: datetime, catalog: Catalog) -> TradingStatusInfo:
    block = current_block(now, build_timeline(catalog))
    if block is not None:
        if block.type in _GREEN:
            return TradingStatusInfo(TradingStatus.GREEN, block.name)
        if block.type in _AMBER:
            return TradingStatusInfo(TradingStatus.AMBER, block.name)
        if block.type in _RED:
            return TradingStatusInfo(TradingStatus.RED, block.name)

    warning = _news_warning(now, catalog)
    if warning is not None:
        return TradingStatusInfo(TradingStatus.AMBER, warning)
    return TradingStatusInfo(TradingStatus.RED, OUTSIDE_HOURS)
