"""ASCII visualisation for development-time verification.

This module is dev-only and not imported by production code.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from availability_primitives.timefmt import is_valid_time, minutes_of
from availability_primitives.weekday import ordered_days

if TYPE_CHECKING:
    from availability_primitives.calendar import AvailabilityCalendar
    from availability_primitives.types import LocaleContext, TimeInterval
    from availability_primitives.weekly import WeeklySchedule

# 24-hour timeline, each char = 30 minutes (48 chars per day)
CHARS_PER_DAY = 48
MINUTES_PER_CHAR = 30


def _header() -> str:
    header_hours = "".join(f"{h:02d}" if h % 3 == 0 else "  " for h in range(24))
    return f"{'':>16s}  {header_hours}"


def _row(intervals: list[TimeInterval]) -> str:
    """'.' = unavailable, '#' = available, '?' = interval with unusable times."""
    row = list("." * CHARS_PER_DAY)
    for iv in intervals:
        if not is_valid_time(iv.start_time):
            row[0] = "?"
            continue
        start_min = minutes_of(iv.start_time)
        if iv.end_time == "24:00":
            end_min = 24 * 60
        elif is_valid_time(iv.end_time):
            end_min = minutes_of(iv.end_time)
        else:
            row[0] = "?"
            continue
        for i in range(start_min // MINUTES_PER_CHAR, min(-(-end_min // MINUTES_PER_CHAR), CHARS_PER_DAY)):
            row[i] = "#"
    return "".join(row)


def show_week(schedule: WeeklySchedule, ctx: LocaleContext | None = None) -> str:
    """Print the weekly pattern, one row per weekday in locale order.

    Returns the string and also prints to stdout.
    """
    locale_tag = ctx.locale_tag if ctx else None
    first_weekday = ctx.first_weekday if ctx else 0
    grouped = schedule.grouped()

    lines = [_header()]
    for day in ordered_days(locale_tag, first_weekday):
        lines.append(f"{day.label:>16s}  {_row(grouped[day.id])}")

    result = "\n".join(lines)
    print(result)
    return result


def show_calendar(cal: AvailabilityCalendar, start: date, end: date) -> str:
    """Print effective availability for dates in [start, end).

    Dates carrying an exception are marked with '*'.
    Returns the string and also prints to stdout.
    """
    lines = [_header()]
    for current, intervals in cal.intervals_in_range(start, end):
        marker = "*" if cal.exception_for(current) else " "
        label = f"{current.strftime('%a %d %b')}{marker}"
        lines.append(f"{label:>16s}  {_row(intervals)}")

    result = "\n".join(lines)
    print(result)
    return result
