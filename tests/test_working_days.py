from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from sandbox_seed.working_days import SeedClock, next_working_day, timestamp_days_ago, working_days

UTC = ZoneInfo("UTC")
# 2026-10-18 is a Sunday.
SUNDAY = date(2026, 10, 18)


def test_working_days_skip_weekends_and_run_oldest_first() -> None:
    assert working_days(7, SUNDAY) == [6, 5, 4, 3, 2]


def test_working_days_never_include_today() -> None:
    friday = date(2026, 10, 16)
    assert working_days(1, friday) == [1]
    assert 0 not in working_days(10, friday)


def test_next_working_day_returns_following_candidate() -> None:
    assert next_working_day(5, [6, 5, 4, 3, 2]) == 4
    assert next_working_day(6, [6, 5, 4, 3, 2]) == 5


def test_next_working_day_falls_back_for_last_or_unknown_day() -> None:
    assert next_working_day(2, [6, 5, 4, 3, 2]) == 1
    assert next_working_day(1, [3, 2, 1]) == 1
    assert next_working_day(9, [6, 5, 4]) == 8


def test_clock_timestamp_starts_at_ten_am() -> None:
    clock = SeedClock(tz=UTC, today=date(2026, 10, 16))
    assert clock.timestamp_days_ago(1) == datetime(2026, 10, 15, 10, tzinfo=UTC)
    assert clock.timestamp_days_ago(1, 2) == datetime(2026, 10, 15, 12, tzinfo=UTC)
    assert clock.timestamp_days_ago(0, 1.5) == datetime(2026, 10, 16, 11, 30, tzinfo=UTC)


def test_clock_respects_timezone() -> None:
    tz = ZoneInfo("America/New_York")
    clock = SeedClock.from_settings("America/New_York", today=date(2026, 10, 16))
    stamp = clock.timestamp_days_ago(2, 3)
    assert stamp == datetime(2026, 10, 14, 13, tzinfo=tz)
    assert clock.date_days_ago(2) == date(2026, 10, 14)


def test_module_level_timestamp_uses_given_clock() -> None:
    clock = SeedClock(tz=UTC, today=date(2026, 10, 16))
    assert timestamp_days_ago(3, 1, clock=clock) == datetime(2026, 10, 13, 11, tzinfo=UTC)


def test_unknown_timezone_falls_back_to_utc() -> None:
    clock = SeedClock.from_settings("Not/A_Zone", today=date(2026, 10, 16))
    assert clock.timestamp_days_ago(1) == datetime(2026, 10, 15, 10, tzinfo=UTC)
