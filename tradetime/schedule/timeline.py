"""
Day-Timeline Builder.

Lays every active recurring window onto a 00:00-24:00 UTC track and fills the
uncovered intervals with synthetic "inactive" blocks, so consumers get a
contiguous sequence. Overlapping windows are kept as separate blocks; layout of
stacked blocks is left to the consumer.
"""

from __future__ import annotations

from typing import Iterable, Optional

from tradetime.schedule.types import (
    MINUTES_PER_DAY,
    BlockType,
    Catalog,
    RecurringWindow,
    SessionType,
    TimeBlock,
)

INACTIVE_NAME = "Inactive"


def _block(
    block_type: BlockType,
    name: str,
    start_minutes: int,
    end_minutes: int,
    description: Optional[str] = None,
    window: Optional[RecurringWindow] = None,
) -> TimeBlock:
    return TimeBlock(
        type=block_type,
        name=name,
        start_hour=start_minutes // 60,
        start_minute=start_minutes % 60,
        end_hour=end_minutes // 60,
        end_minute=end_minutes % 60,
        description=description,
        probability=window.probability if window is not None else None,
    )


def _session_block_type(window: RecurringWindow) -> BlockType:
    if window.session_type is None:
        return BlockType.CUSTOM
    return BlockType(SessionType(window.session_type).value)


def window_blocks(window: RecurringWindow, block_type: BlockType) -> list[TimeBlock]:
    """
    Blocks for one window: one block, or two when it crosses midnight
    (evening part first). Zero-duration windows produce nothing.
    """
    start = window.start.minutes_of_day
    end = window.end.minutes_of_day
    if start == end:
        return []
    if start < end:
        return [_block(block_type, window.name, start, end, window.description, window)]
    blocks = [_block(block_type, window.name, start, MINUTES_PER_DAY, window.description, window)]
    if end > 0:
        blocks.append(_block(block_type, window.name, 0, end, window.description, window))
    return blocks


def _gaps(blocks: Iterable[TimeBlock]) -> list[tuple[int, int]]:
    """Uncovered ``[start, end)`` intervals of the day."""
    intervals = sorted((b.start_minutes, b.end_minutes) for b in blocks)
    gaps: list[tuple[int, int]] = []
    cursor = 0
    for start, end in intervals:
        if start > cursor:
            gaps.append((cursor, start))
        cursor = max(cursor, end)
    if cursor < MINUTES_PER_DAY:
        gaps.append((cursor, MINUTES_PER_DAY))
    return gaps


def build_timeline(catalog: Catalog) -> list[TimeBlock]:
    """Contiguous, start-ordered blocks covering the whole UTC day."""
    placed: list[TimeBlock] = []
    sources: list[tuple[BlockType | None, tuple[RecurringWindow, ...]]] = [
        (BlockType.MACRO, catalog.macros),
        (BlockType.KILLZONE, catalog.killzones),
        (None, catalog.market_sessions),
    ]
    for block_type, windows in sources:
        for window in windows:
            if not window.is_active:
                continue
            kind = block_type or _session_block_type(window)
            placed.extend(window_blocks(window, kind))

    fillers = [_block(BlockType.INACTIVE, INACTIVE_NAME, s, e) for s, e in _gaps(placed)]

    # sorted() is stable: placed blocks keep catalog order on equal starts
    return sorted(placed + fillers, key=lambda b: b.start_minutes)
