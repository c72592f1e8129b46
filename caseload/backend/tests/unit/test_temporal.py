from __future__ import annotations

import sys
from datetime import date, datetime
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

import pytest

from caseload.backend.src.core.errors import ParseError
from caseload.backend.src.services.temporal import (
    date_key,
    format_time_12_hour,
    format_time_range,
    is_after,
    is_before,
    is_same_day,
    js_weekday,
    parse_instant,
    parse_local_date,
    parse_time_of_day,
)


def test_parse_local_date_ignores_time_and_offset() -> None:
    assert parse_local_date("2025-03-10T14:00:00Z") == parse_local_date("2025-03-10")
    assert parse_local_date("2025-03-10T23:30:00-08:00") == date(2025, 3, 10)
    assert parse_local_date(datetime(2025, 3, 10, 22, 15)) == date(2025, 3, 10)


@pytest.mark.parametrize("value", ["", "tomorrow", "2025-02-30", "03/10/2025"])
def test_parse_local_date_rejects_malformed_values(value: str) -> None:
    with pytest.raises(ParseError):
        parse_local_date(value, "dueDate")


def test_parse_error_carries_field_and_value() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_instant("not-a-date", "date")

    assert excinfo.value.field == "date"
    assert excinfo.value.value == "not-a-date"
    assert isinstance(excinfo.value, ValueError)


def test_parse_instant_keeps_recorded_wall_clock() -> None:
    assert parse_instant("2025-03-10T09:00:00") == datetime(2025, 3, 10, 9, 0)
    assert parse_instant("2025-03-10T09:00:00.000Z") == datetime(2025, 3, 10, 9, 0)
    assert parse_instant("2025-03-10T09:00:00+05:00") == datetime(2025, 3, 10, 9, 0)
    assert parse_instant("2025-03-10") == datetime(2025, 3, 10, 0, 0)


def test_parse_time_of_day() -> None:
    assert parse_time_of_day("23:45") == (23, 45)
    assert parse_time_of_day("8:05") == (8, 5)
    assert parse_time_of_day("08:05:00") == (8, 5)
    for bad in ("24:00", "12:60", "9am", "", None):
        with pytest.raises(ParseError):
            parse_time_of_day(bad)


def test_calendar_comparisons_ignore_time_of_day() -> None:
    assert is_same_day(datetime(2025, 3, 10, 23, 59), "2025-03-10")
    assert is_before(date(2025, 3, 9), "2025-03-10T00:00:00")
    assert not is_before(datetime(2025, 3, 10, 1, 0), datetime(2025, 3, 10, 23, 0))
    assert is_after("2025-03-11", date(2025, 3, 10))
    assert not is_after("2025-03-10T23:59:00", date(2025, 3, 10))


def test_js_weekday_counts_from_sunday() -> None:
    assert js_weekday(date(2025, 3, 9)) == 0
    assert js_weekday(date(2025, 3, 12)) == 3
    assert js_weekday("2025-03-15") == 6


def test_date_key() -> None:
    assert date_key("2025-03-10T14:00:00Z") == "2025-03-10"


@pytest.mark.parametrize(
    ("hour", "minute", "expected"),
    [
        (0, 5, "12:05 am"),
        (9, 30, "9:30 am"),
        (12, 0, "12:00 pm"),
        (15, 7, "3:07 pm"),
        (23, 59, "11:59 pm"),
    ],
)
def test_format_time_12_hour(hour: int, minute: int, expected: str) -> None:
    assert format_time_12_hour(datetime(2025, 3, 10, hour, minute)) == expected


def test_format_time_range() -> None:
    start = datetime(2025, 3, 10, 9, 0)
    end = datetime(2025, 3, 10, 9, 30)

    assert format_time_range(start) == "9:00 am"
    assert format_time_range(start, end) == "9:00 am-9:30 am"
