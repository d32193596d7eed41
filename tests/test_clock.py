from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from autoshutdown.core.clock import (
    DAY_SECONDS,
    TimeOfDay,
    format_duration,
    next_occurrence,
    parse_time_of_day,
)
from autoshutdown.core.errors import ConfigParseError, ConfigRangeError

UTC = ZoneInfo("UTC")
NEW_YORK = ZoneInfo("America/New_York")


def _utc(*args: int) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


def test_parse_time_of_day_accepts_two_digit_fields() -> None:
    assert parse_time_of_day("04:00:00") == TimeOfDay(4, 0, 0)
    assert parse_time_of_day("23:59:59") == TimeOfDay(23, 59, 59)
    assert str(parse_time_of_day("07:05:09")) == "07:05:09"


@pytest.mark.parametrize("text", ["4:0:0", "04:00", "ab:00:00", "", "04:00:00:00", "04-00-00"])
def test_parse_time_of_day_rejects_malformed_text(text: str) -> None:
    with pytest.raises(ConfigParseError):
        parse_time_of_day(text)


@pytest.mark.parametrize(
    ("text", "field"),
    [("25:00:00", "hour"), ("24:00:00", "hour"), ("00:60:00", "minute"), ("00:00:60", "second")],
)
def test_parse_time_of_day_rejects_out_of_range_fields(text: str, field: str) -> None:
    with pytest.raises(ConfigRangeError) as excinfo:
        parse_time_of_day(text)
    assert excinfo.value.field == field


def test_next_occurrence_later_today() -> None:
    now = _utc(2026, 3, 1, 3, 0, 0)
    assert next_occurrence(now, 4, 0, 0, UTC) == now + 3600


def test_next_occurrence_exact_match_rolls_to_next_day() -> None:
    now = _utc(2026, 3, 1, 4, 0, 0)
    assert next_occurrence(now, 4, 0, 0, UTC) == now + DAY_SECONDS


def test_next_occurrence_already_passed_rolls_to_next_day() -> None:
    now = _utc(2026, 3, 1, 5, 0, 0)
    assert next_occurrence(now, 4, 0, 0, UTC) == now + 23 * 3600


def test_next_occurrence_ignores_sub_second_part_of_now() -> None:
    now = _utc(2026, 3, 1, 4, 0, 0) + 0.5
    assert next_occurrence(now, 4, 0, 0, UTC) == int(now) + DAY_SECONDS


@pytest.mark.parametrize("zone", [UTC, NEW_YORK])
def test_next_occurrence_is_within_one_day(zone: ZoneInfo) -> None:
    start = _utc(2026, 3, 6, 0, 0, 0)
    targets = [(0, 0, 0), (2, 30, 0), (4, 0, 0), (12, 15, 30), (23, 59, 59)]
    for now in range(start, start + 4 * DAY_SECONDS, 1733):
        for hour, minute, second in targets:
            result = next_occurrence(now, hour, minute, second, zone)
            assert now < result <= now + DAY_SECONDS


def test_next_occurrence_moves_past_spring_forward_gap() -> None:
    # 2026-03-08 02:30 does not exist in New York; clocks jump 02:00 -> 03:00.
    now = int(datetime(2026, 3, 8, 0, 0, tzinfo=NEW_YORK).timestamp())
    result = next_occurrence(now, 2, 30, 0, NEW_YORK)
    assert result == _utc(2026, 3, 8, 7, 30, 0)


def test_next_occurrence_follows_fall_back_day_length() -> None:
    now = int(datetime(2026, 11, 1, 0, 0, tzinfo=NEW_YORK).timestamp())
    result = next_occurrence(now, 4, 0, 0, NEW_YORK)
    assert result - now == 5 * 3600


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "0 seconds"),
        (1, "1 second"),
        (500, "8 minutes 20 seconds"),
        (3600, "1 hour"),
        (5400, "1 hour 30 minutes"),
        (90061, "1 day 1 hour 1 minute 1 second"),
    ],
)
def test_format_duration(seconds: int, expected: str) -> None:
    assert format_duration(seconds) == expected


def test_next_occurrence_late_on_fall_back_day_keeps_wall_clock_time() -> None:
    # 2026-11-01 is 25 hours long in New York; one fixed day from 00:30 EDT
    # lands on 23:30 EST, which is already behind 23:45.
    now = int(datetime(2026, 11, 1, 23, 45, tzinfo=NEW_YORK).timestamp())

    result = next_occurrence(now, 0, 30, 0, NEW_YORK)

    local = datetime.fromtimestamp(result, tz=NEW_YORK)
    assert (local.month, local.day, local.hour, local.minute) == (11, 2, 0, 30)
    assert result - now == 45 * 60


def test_next_occurrence_across_fall_back_week() -> None:
    start = _utc(2026, 10, 30, 0, 0, 0)
    targets = [(0, 0, 0), (0, 30, 0), (4, 0, 0), (12, 15, 30), (23, 59, 59)]
    for now in range(start, start + 4 * DAY_SECONDS, 1733):
        for hour, minute, second in targets:
            result = next_occurrence(now, hour, minute, second, NEW_YORK)
            assert now < result <= now + DAY_SECONDS + 3600
