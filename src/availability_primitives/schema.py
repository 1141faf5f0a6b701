"""Input validation for weekly intervals and exception dates."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from availability_primitives.timefmt import is_valid_time, minutes_of
from availability_primitives.types import ExceptionDate, TimeInterval


def validate_intervals(day: int, intervals: list[TimeInterval]) -> list[str]:
    """Validate one weekday's intervals. Returns list of error messages (empty = valid).

    Checks:
    - Day index is canonical 0-6
    - Start and end are complete HH:MM times
    - start < end
    """
    errors: list[str] = []

    if not isinstance(day, int) or day < 0 or day > 6:
        return [f"Invalid day index: {day} (must be 0-6)"]

    for i, interval in enumerate(intervals):
        bad = False
        for field in ("start_time", "end_time"):
            value = getattr(interval, field)
            if not is_valid_time(value):
                errors.append(
                    f"Day {day}, interval {i}: {field} '{value}' is not HH:MM"
                )
                bad = True
        if not bad and interval.start_time >= interval.end_time:
            errors.append(
                f"Day {day}, interval {i}: start {interval.start_time} "
                f"must be before end {interval.end_time}"
            )

    return errors


def find_overlaps(intervals: Iterable[TimeInterval]) -> list[tuple[TimeInterval, TimeInterval]]:
    """Pairs of valid intervals on the same day that overlap.

    Intervals are half-open, so 09:00-12:00 and 12:00-17:00 do not overlap.
    Invalid intervals are ignored here; validate_intervals reports them.
    """
    valid = [
        iv for iv in intervals
        if is_valid_time(iv.start_time)
        and is_valid_time(iv.end_time)
        and iv.start_time < iv.end_time
    ]
    valid.sort(key=lambda iv: (minutes_of(iv.start_time), minutes_of(iv.end_time)))

    overlaps: list[tuple[TimeInterval, TimeInterval]] = []
    for j in range(1, len(valid)):
        for k in range(j):
            if valid[j].start_time < valid[k].end_time:
                overlaps.append((valid[k], valid[j]))
    return overlaps


def validate_exception(exception: ExceptionDate) -> list[str]:
    """Validate a single exception before it is sent to the backend.

    Checks:
    - Date parses as YYYY-MM-DD
    - Either both times are set or neither (full day)
    - Set times are valid HH:MM with start < end
    """
    errors: list[str] = []

    try:
        date.fromisoformat(exception.date)
    except (ValueError, TypeError):
        errors.append(f"Invalid date: {exception.date}")

    start, end = exception.start_time, exception.end_time
    if bool(start) != bool(end):
        errors.append(
            f"Date {exception.date}: start and end times are required "
            f"for non-full-day exceptions"
        )
        return errors

    if start and end:
        for field, value in (("start_time", start), ("end_time", end)):
            if not is_valid_time(value):
                errors.append(
                    f"Date {exception.date}: invalid {field} '{value}'"
                )
        if is_valid_time(start) and is_valid_time(end) and start >= end:
            errors.append(
                f"Date {exception.date}: start {start} must be before end {end}"
            )

    return errors
