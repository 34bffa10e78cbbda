"""Seed clock and business-day helpers.

Day offsets count backwards from the run date: ``1`` is yesterday and larger
offsets are further in the past.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

BASE_HOUR = 10
WEEKEND = (5, 6)


@dataclass(frozen=True)
class SeedClock:
    """Pins "today" and the timezone for one seed run."""

    tz: tzinfo = field(default_factory=lambda: ZoneInfo("UTC"))
    today: Optional[date] = None

    @classmethod
    def from_settings(cls, timezone_name: str, today: Optional[date] = None) -> "SeedClock":
        try:
            tz = ZoneInfo(timezone_name)
        except ZoneInfoNotFoundError:
            logger.warning("Unknown seed timezone %r, falling back to UTC", timezone_name)
            tz = ZoneInfo("UTC")
        return cls(tz=tz, today=today or datetime.now(tz).date())

    @property
    def current_date(self) -> date:
        if self.today is not None:
            return self.today
        return datetime.now(self.tz).date()

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def date_days_ago(self, days_ago: int) -> date:
        return self.current_date - timedelta(days=days_ago)

    def timestamp_days_ago(self, days_ago: int, hours_offset: float = 0) -> datetime:
        midnight = datetime.combine(self.date_days_ago(days_ago), time.min, tzinfo=self.tz)
        return midnight + timedelta(hours=BASE_HOUR + hours_offset)


def working_days(lookback_days: int, today: date) -> List[int]:
    """Return offsets ``lookback_days..1`` whose calendar date is a weekday."""
    days: List[int] = []
    for offset in range(lookback_days, 0, -1):
        if (today - timedelta(days=offset)).weekday() not in WEEKEND:
            days.append(offset)
    return days


def next_working_day(current_offset: int, candidates: Sequence[int]) -> int:
    """The candidate right after ``current_offset``.

    Falls back to ``max(1, current_offset - 1)`` when ``current_offset`` is not in
    ``candidates`` or is the last one, even though that can land on a day that is
    not a working day or not after the current one.
    """
    try:
        index = list(candidates).index(current_offset)
    except ValueError:
        return max(1, current_offset - 1)
    if index == len(candidates) - 1:
        return max(1, current_offset - 1)
    return candidates[index + 1]


def timestamp_days_ago(
    days_ago: int,
    hours_offset: float = 0,
    *,
    clock: Optional[SeedClock] = None,
) -> datetime:
    """Seed timestamp: ``BASE_HOUR + hours_offset`` on the day ``days_ago`` before today."""
    return (clock or SeedClock()).timestamp_days_ago(days_ago, hours_offset)


__all__ = [
    "BASE_HOUR",
    "SeedClock",
    "next_working_day",
    "timestamp_days_ago",
    "working_days",
]
