"""Tests for recurring schedule calculation."""

from datetime import date, datetime, time, timedelta, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from paralello.core.errors import ValidationError
from paralello.core.scheduling import (
    Cadence,
    CadenceKind,
    compute_next_run,
    parse_time_of_day,
    start_of_local_day,
    sunday_weekday,
    utc_naive,
    validate_weekdays,
)

UTC = timezone.utc


def utc(*args):
    return datetime(*args, tzinfo=UTC)


def test_sunday_weekday_numbering():
    """Weekdays are numbered from Sunday."""
    assert sunday_weekday(date(2026, 10, 18)) == 0  # Sunday
    assert sunday_weekday(date(2026, 10, 19)) == 1  # Monday
    assert sunday_weekday(date(2026, 10, 24)) == 6  # Saturday


def test_weekly_wednesday_to_next_monday():
    """Weekly Monday 09:00 evaluated on a Wednesday lands on the following Monday."""
    cadence = Cadence.weekly(1, "09:00")
    result = compute_next_run(cadence, utc(2026, 10, 21, 10, 0))
    assert result == utc(2026, 10, 26, 9, 0)


def test_weekly_same_day_before_time():
    """Same weekday with the time still ahead runs today."""
    cadence = Cadence.weekly(1, "09:00")
    assert compute_next_run(cadence, utc(2026, 10, 19, 8, 0)) == utc(2026, 10, 19, 9, 0)


def test_weekly_same_day_at_time_moves_a_week():
    """A candidate equal to now is not in the future."""
    cadence = Cadence.weekly(1, "09:00")
    assert compute_next_run(cadence, utc(2026, 10, 19, 9, 0)) == utc(2026, 10, 26, 9, 0)


def test_weekly_result_always_future_and_on_weekday():
    """Every weekday and hour of a week yields a future run on the right weekday."""
    start = utc(2026, 10, 18, 0, 30)
    for weekday in range(7):
        cadence = Cadence.weekly(weekday, "14:15")
        for hours in range(0, 7 * 24, 5):
            now = start + timedelta(hours=hours)
            result = compute_next_run(cadence, now)
            assert result > now
            assert result - now <= timedelta(days=7)
            assert sunday_weekday(result.date()) == weekday
            assert result.time() == time(14, 15)


def test_daily_is_tomorrow():
    """Daily cadence runs on the next calendar day."""
    cadence = Cadence.daily("07:30")
    assert compute_next_run(cadence, utc(2026, 10, 19, 5, 0)) == utc(2026, 10, 20, 7, 30)
    assert compute_next_run(cadence, utc(2026, 12, 31, 23, 0)) == utc(2027, 1, 1, 7, 30)


def test_monthly_current_month():
    """Day still ahead this month."""
    cadence = Cadence.monthly(25, "10:00")
    assert compute_next_run(cadence, utc(2026, 10, 19, 12, 0)) == utc(2026, 10, 25, 10, 0)


def test_monthly_next_month():
    """Day already passed rolls to next month."""
    cadence = Cadence.monthly(10, "10:00")
    assert compute_next_run(cadence, utc(2026, 10, 19, 12, 0)) == utc(2026, 11, 10, 10, 0)


def test_monthly_december_rolls_year():
    cadence = Cadence.monthly(5, "08:00")
    assert compute_next_run(cadence, utc(2026, 12, 20, 12, 0)) == utc(2027, 1, 5, 8, 0)


def test_monthly_clamps_to_last_day():
    """Day 31 in a shorter month runs on its last day."""
    cadence = Cadence.monthly(31, "09:00")
    assert compute_next_run(cadence, utc(2026, 2, 1, 12, 0)) == utc(2026, 2, 28, 9, 0)
    assert compute_next_run(cadence, utc(2026, 1, 31, 10, 0)) == utc(2026, 2, 28, 9, 0)
    assert compute_next_run(cadence, utc(2028, 2, 10, 0, 0)) == utc(2028, 2, 29, 9, 0)


def test_monthly_result_always_future():
    """Monthly results are in the future and at most about a month away."""
    now = utc(2026, 1, 1, 3, 0)
    for day in (1, 15, 28, 29, 30, 31):
        cadence = Cadence.monthly(day, "09:00")
        for step in range(0, 400, 7):
            current = now + timedelta(days=step)
            result = compute_next_run(cadence, current)
            assert result > current
            assert result - current <= timedelta(days=62)


def test_naive_now_is_utc():
    cadence = Cadence.daily("09:00")
    result = compute_next_run(cadence, datetime(2026, 10, 19, 12, 0))
    assert result.tzinfo is not None
    assert result == utc(2026, 10, 20, 9, 0)


def test_time_of_day_applied_in_zone():
    """Time-of-day is wall-clock time in the given zone; the result is UTC."""
    zone = ZoneInfo("America/Sao_Paulo")
    cadence = Cadence.weekly(1, "09:00")
    now = datetime(2026, 10, 21, 10, 0, tzinfo=zone)
    result = compute_next_run(cadence, now)
    assert result.utcoffset() == timedelta(0)
    assert result == utc(2026, 10, 26, 12, 0)
    assert compute_next_run(cadence, now.astimezone(UTC), tz=zone) == result


@pytest.mark.parametrize(
    "kwargs",
    [
        {"kind": "weekly", "time_of_day": "09:00", "weekday": 7},
        {"kind": "weekly", "time_of_day": "09:00"},
        {"kind": "weekly", "time_of_day": "09:00", "weekday": 1, "day_of_month": 3},
        {"kind": "monthly", "time_of_day": "09:00", "day_of_month": 0},
        {"kind": "monthly", "time_of_day": "09:00", "day_of_month": 32},
        {"kind": "monthly", "time_of_day": "09:00", "day_of_month": 5, "weekday": 2},
        {"kind": "daily", "time_of_day": "09:00", "weekday": 1},
        {"kind": "yearly", "time_of_day": "09:00"},
        {"kind": "daily", "time_of_day": "25:00"},
        {"kind": "daily", "time_of_day": "9am"},
    ],
)
def test_invalid_cadence_rejected(kwargs):
    with pytest.raises(ValidationError):
        Cadence(**kwargs)


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        parse_time_of_day("12:60")


def test_parse_time_of_day():
    assert parse_time_of_day("9:05") == time(9, 5)
    assert parse_time_of_day("23:59:00") == time(23, 59)
    assert parse_time_of_day(time(8, 0, 30)) == time(8, 0)


def test_validate_weekdays():
    """Weekday sets are sorted, unique and non-empty."""
    assert validate_weekdays([5, 1, 1, 3]) == [1, 3, 5]
    with pytest.raises(ValidationError):
        validate_weekdays([])
    with pytest.raises(ValidationError):
        validate_weekdays([1, 9])
    with pytest.raises(ValidationError):
        validate_weekdays([True])


def test_cadence_from_report():
    report = SimpleNamespace(frequency="monthly", time_of_day="18:00", weekday=None, day_of_month=15)
    cadence = Cadence.from_report(report)
    assert cadence.kind == CadenceKind.MONTHLY
    assert cadence.time_of_day == time(18, 0)
    assert cadence.day_of_month == 15


def test_utc_naive():
    zone = ZoneInfo("America/Sao_Paulo")
    assert utc_naive(datetime(2026, 10, 19, 9, 0, tzinfo=zone)) == datetime(2026, 10, 19, 12, 0)
    assert utc_naive(datetime(2026, 10, 19, 9, 0)) == datetime(2026, 10, 19, 9, 0)


def test_start_of_local_day():
    zone = ZoneInfo("America/Sao_Paulo")
    now = utc(2026, 10, 19, 2, 0)  # still the 18th in Sao Paulo
    assert start_of_local_day(now, zone) == utc(2026, 10, 18, 3, 0)
    assert start_of_local_day(now) == utc(2026, 10, 19, 0, 0)
