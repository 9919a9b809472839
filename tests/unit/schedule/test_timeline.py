from __future__ import annotations

from tradetime.schedule.timeline import build_timeline, window_blocks
from tradetime.schedule.types import BlockType, Catalog, MINUTES_PER_DAY, SessionType


def _spans(blocks):
    return [(b.type, b.start_minutes, b.end_minutes) for b in blocks]


def _assert_covers_day(blocks) -> None:
    assert blocks[0].start_minutes == 0
    reach = 0
    for block in blocks:
        assert block.start_minutes <= reach, f"gap before {block}"
        reach = max(reach, block.end_minutes)
    assert reach == MINUTES_PER_DAY


class TestWindowBlocks:
    def test_plain_window(self, window) -> None:
        blocks = window_blocks(window("m", "09:33", "10:00"), BlockType.MACRO)
        assert _spans(blocks) == [(BlockType.MACRO, 573, 600)]

    def test_wraparound_is_split(self, window) -> None:
        blocks = window_blocks(window("late", "22:00", "01:00"), BlockType.KILLZONE)
        assert _spans(blocks) == [
            (BlockType.KILLZONE, 1320, 1440),
            (BlockType.KILLZONE, 0, 60),
        ]
        assert blocks[0].end_hour == 24 and blocks[0].end_minute == 0

    def test_ending_at_midnight_has_no_morning_part(self, window) -> None:
        blocks = window_blocks(window("eve", "22:00", "00:00"), BlockType.MACRO)
        assert _spans(blocks) == [(BlockType.MACRO, 1320, 1440)]

    def test_zero_duration_is_skipped(self, window) -> None:
        assert window_blocks(window("z", "12:00", "12:00"), BlockType.MACRO) == []


class TestBuildTimeline:
    def test_empty_catalog_is_one_inactive_day(self) -> None:
        blocks = build_timeline(Catalog())
        assert _spans(blocks) == [(BlockType.INACTIVE, 0, MINUTES_PER_DAY)]
        assert blocks[0].name == "Inactive"

    def test_gaps_are_filled(self, window) -> None:
        catalog = Catalog(macros=(window("late", "22:00", "01:00"),))
        assert _spans(build_timeline(catalog)) == [
            (BlockType.MACRO, 0, 60),
            (BlockType.INACTIVE, 60, 1320),
            (BlockType.MACRO, 1320, 1440),
        ]

    def test_default_catalog_covers_the_day(self, default_catalog) -> None:
        blocks = build_timeline(default_catalog)
        _assert_covers_day(blocks)
        starts = [b.start_minutes for b in blocks]
        assert starts == sorted(starts)

    def test_overlaps_are_kept(self, default_catalog) -> None:
        blocks = build_timeline(default_catalog)
        names = [b.name for b in blocks]
        # premarket (07:00-09:30) overlaps the London killzone (06:00-09:00)
        assert "London KZ" in names and "Pre-Market" in names

    def test_catalog_order_breaks_start_ties(self, window) -> None:
        catalog = Catalog(
            macros=(window("mac", "06:00", "06:30"),),
            killzones=(window("kz", "06:00", "09:00"),),
            market_sessions=(window("pre", "06:00", "07:00", session_type=SessionType.PREMARKET),),
        )
        at_six = [b for b in build_timeline(catalog) if b.start_minutes == 360]
        assert [b.type for b in at_six] == [BlockType.MACRO, BlockType.KILLZONE, BlockType.PREMARKET]

    def test_session_types_map_to_blocks(self, window) -> None:
        catalog = Catalog(
            market_sessions=(
                window("lunch", "18:00", "19:00", session_type=SessionType.LUNCH),
                window("other", "20:00", "21:00"),
            )
        )
        types = {b.name: b.type for b in build_timeline(catalog)}
        assert types["lunch"] == BlockType.LUNCH
        assert types["other"] == BlockType.CUSTOM

    def test_disabled_windows_are_not_placed(self, window) -> None:
        catalog = Catalog(macros=(window("off", "08:00", "09:00", is_active=False),))
        assert _spans(build_timeline(catalog)) == [(BlockType.INACTIVE, 0, MINUTES_PER_DAY)]
