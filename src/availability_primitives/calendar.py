"""AvailabilityCalendar: effective availability per date.

The weekly pattern defines recurring intervals. Exception dates override
specific dates. All times are device-local 'HH:MM' strings.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Iterator

from availability_primitives.timefmt import is_valid_time, minutes_of
from availability_primitives.types import ExceptionDate, TimeInterval
from availability_primitives.weekday import canonical_day_of
from availability_primitives.weekly import WeeklySchedule

# End-of-day marker for a full-day available exception.
END_OF_DAY = "24:00"
FULL_DAY = TimeInterval("00:00", END_OF_DAY)


def _to_minutes(value: str) -> int:
    return 24 * 60 if value == END_OF_DAY else minutes_of(value)


def _to_clock(minutes: int) -> str:
    if minutes == 24 * 60:
        return END_OF_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _subtract(intervals: list[TimeInterval], start: str, end: str) -> list[TimeInterval]:
    """Remove the window [start, end) from each valid interval."""
    cut_start, cut_end = minutes_of(start), minutes_of(end)
    remaining: list[TimeInterval] = []
    for iv in intervals:
        if not (is_valid_time(iv.start_time) and is_valid_time(iv.end_time)):
            continue
        iv_start, iv_end = minutes_of(iv.start_time), minutes_of(iv.end_time)
        if iv_end <= cut_start or iv_start >= cut_end:
            remaining.append(iv)
            continue
        if iv_start < cut_start:
            remaining.append(TimeInterval(iv.start_time, _to_clock(cut_start)))
        if iv_end > cut_end:
            remaining.append(TimeInterval(_to_clock(cut_end), iv.end_time))
    return remaining


def fallback_availability(schedule: WeeklySchedule, date_iso: str) -> bool | None:
    """Whether the weekly pattern alone makes the user available on ``date_iso``.

    Returns None when the date cannot be parsed.
    """
    try:
        d = date.fromisoformat(date_iso)
    except (ValueError, TypeError):
        return None
    return schedule.has_availability(canonical_day_of(d))


class AvailabilityCalendar:
    """Resolves weekly pattern + exceptions into intervals for a given date."""

    def __init__(
        self,
        schedule: WeeklySchedule,
        exceptions: Iterable[ExceptionDate] = (),
    ) -> None:
        self.schedule = schedule
        # date is the natural key; a later record for the same date wins.
        self._exceptions: dict[str, ExceptionDate] = {}
        for exception in exceptions:
            self._exceptions[exception.date] = exception

    def exception_for(self, d: date) -> ExceptionDate | None:
        return self._exceptions.get(d.isoformat())

    def base_intervals_for_date(self, d: date) -> list[TimeInterval]:
        """Weekly-pattern intervals for the date's weekday, ignoring exceptions."""
        intervals = self.schedule.intervals_for(canonical_day_of(d))
        return sorted(intervals, key=lambda iv: iv.start_time)

    def intervals_for_date(self, d: date) -> list[TimeInterval]:
        """Effective intervals for a date, sorted by start.

        - No exception: the weekly pattern.
        - Full-day unavailable: nothing.
        - Full-day available: 00:00-24:00.
        - Timed available: exactly that interval.
        - Timed unavailable: the weekly pattern minus that window.
        """
        exception = self.exception_for(d)
        base = self.base_intervals_for_date(d)
        if exception is None:
            return base

        if exception.is_full_day:
            return [FULL_DAY] if exception.is_available else []

        if not (is_valid_time(exception.start_time) and is_valid_time(exception.end_time)):
            return base

        if exception.is_available:
            return [TimeInterval(exception.start_time, exception.end_time)]
        return _subtract(base, exception.start_time, exception.end_time)

    def is_available_on(self, d: date) -> bool:
        return bool(self.intervals_for_date(d))

    def available_minutes_on(self, d: date) -> int:
        total = 0
        for iv in self.intervals_for_date(d):
            if is_valid_time(iv.start_time) and (
                iv.end_time == END_OF_DAY or is_valid_time(iv.end_time)
            ):
                total += max(0, _to_minutes(iv.end_time) - minutes_of(iv.start_time))
        return total

    def intervals_in_range(
        self, start: date, end: date
    ) -> Iterator[tuple[date, list[TimeInterval]]]:
        """Yield (date, intervals) for each date in [start, end)."""
        current = start
        while current < end:
            yield current, self.intervals_for_date(current)
            current += timedelta(days=1)
