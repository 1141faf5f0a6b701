"""Weekly availability model: per-weekday intervals held in device-local time.

The schedule is a flat, ordered list of slots. Slots for different days are
interleaved, so every per-day operation addresses intervals by their
position among that day's own slots, never by the flat list index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Iterable

from availability_primitives.schema import find_overlaps, validate_intervals
from availability_primitives.timefmt import (
    format_partial_time,
    from_utc_date_time,
    is_valid_time,
    to_utc_date_time,
)
from availability_primitives.types import (
    DEFAULT_END,
    DEFAULT_START,
    LocaleContext,
    TimeInterval,
    WeeklyAvailabilitySlot,
)
from availability_primitives.weekday import canonical_day_of

logger = logging.getLogger(__name__)

DAYS = range(7)
EDITABLE_FIELDS = ("start_time", "end_time")


def group_by_day(slots: Iterable[WeeklyAvailabilitySlot]) -> dict[int, list[TimeInterval]]:
    """Exactly seven buckets (0=Sunday..6=Saturday), insertion order kept."""
    by_day: dict[int, list[TimeInterval]] = {day: [] for day in DAYS}
    for slot in slots:
        by_day[slot.day_of_week].append(slot.interval)
    return by_day


def week_dates(reference: date) -> dict[int, date]:
    """Canonical day -> calendar date for the Sunday-started week holding ``reference``."""
    sunday = reference - timedelta(days=canonical_day_of(reference))
    return {day: sunday + timedelta(days=day) for day in DAYS}


@dataclass(frozen=True)
class CopySource:
    """What a "copy from previous day" action would paste.

    kind is 'current' (duplicate the day's own last interval) or
    'previous' (clone the nearest earlier day's full interval set).
    """

    kind: str
    intervals: tuple[TimeInterval, ...]
    source_day: int


class WeeklySchedule:
    """Editable weekly availability snapshot owned by one screen/session."""

    def __init__(self, slots: Iterable[WeeklyAvailabilitySlot] = ()) -> None:
        self._slots: list[WeeklyAvailabilitySlot] = list(slots)
        for slot in self._slots:
            _check_day(slot.day_of_week)

    def __repr__(self) -> str:
        return f"WeeklySchedule({self._slots!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeeklySchedule):
            return NotImplemented
        return self._slots == other._slots

    @property
    def slots(self) -> tuple[WeeklyAvailabilitySlot, ...]:
        return tuple(self._slots)

    def copy(self) -> WeeklySchedule:
        return WeeklySchedule(self._slots)

    def grouped(self) -> dict[int, list[TimeInterval]]:
        return group_by_day(self._slots)

    def intervals_for(self, day: int) -> list[TimeInterval]:
        _check_day(day)
        return [s.interval for s in self._slots if s.day_of_week == day]

    def has_availability(self, day: int) -> bool:
        return any(s.day_of_week == day for s in self._slots)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def toggle_day(self, day: int) -> None:
        """Clear an available day, or give an unavailable day 09:00-17:00."""
        _check_day(day)
        if self.has_availability(day):
            self._slots = [s for s in self._slots if s.day_of_week != day]
        else:
            self._slots.append(WeeklyAvailabilitySlot(day, DEFAULT_START, DEFAULT_END))

    def add_interval(self, day: int, defaults: TimeInterval | None = None) -> None:
        _check_day(day)
        interval = defaults or TimeInterval(DEFAULT_START, DEFAULT_END)
        self._slots.append(
            WeeklyAvailabilitySlot(day, interval.start_time, interval.end_time)
        )

    def set_day(self, day: int, intervals: Iterable[TimeInterval]) -> None:
        """Replace every interval of ``day``, keeping other days' order."""
        _check_day(day)
        self._slots = [s for s in self._slots if s.day_of_week != day]
        self._slots.extend(
            WeeklyAvailabilitySlot(day, iv.start_time, iv.end_time) for iv in intervals
        )

    def remove_interval(self, day: int, index: int) -> None:
        del self._slots[self._flat_index(day, index)]

    def update_interval(self, day: int, index: int, field: str, value: str) -> None:
        """Set start_time or end_time of one interval, masked for live typing."""
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"field must be one of {EDITABLE_FIELDS}, got {field!r}")
        flat = self._flat_index(day, index)
        self._slots[flat] = replace(self._slots[flat], **{field: format_partial_time(value)})

    def copy_source_for_day(self, day: int) -> CopySource | None:
        """Intervals a copy action would add to ``day``; None if the week is empty.

        Scans backward up to six days, wrapping from Sunday to Saturday.
        """
        own = self.intervals_for(day)
        if own:
            return CopySource("current", (own[-1],), day)
        for offset in range(1, 7):
            previous = (day - offset) % 7
            intervals = self.intervals_for(previous)
            if intervals:
                return CopySource("previous", tuple(intervals), previous)
        return None

    def apply_copy(self, day: int) -> CopySource | None:
        source = self.copy_source_for_day(day)
        if source is not None:
            for interval in source.intervals:
                self.add_interval(day, interval)
        return source

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def is_complete(self, day: int) -> bool:
        """Every interval of ``day`` is a valid HH:MM pair with start < end.

        A day with no intervals is complete (it persists as unavailable).
        """
        return all(
            is_valid_time(iv.start_time)
            and is_valid_time(iv.end_time)
            and iv.start_time < iv.end_time
            for iv in self.intervals_for(day)
        )

    def errors_for(self, day: int) -> list[str]:
        return validate_intervals(day, self.intervals_for(day))

    def overlaps(self, day: int) -> list[tuple[TimeInterval, TimeInterval]]:
        """Overlapping interval pairs on ``day``; logged as a warning, not rejected."""
        found = find_overlaps(self.intervals_for(day))
        if found:
            logger.warning("weekly_intervals_overlap", extra={"day": day, "pairs": len(found)})
        return found

    # ------------------------------------------------------------------
    # UTC boundary
    # ------------------------------------------------------------------

    @classmethod
    def from_utc_slots(
        cls,
        slots: Iterable[WeeklyAvailabilitySlot],
        ctx: LocaleContext,
        reference: date | None = None,
    ) -> WeeklySchedule:
        """Build a local-time schedule from UTC slots.

        Each slot is anchored on its weekday within the week of
        ``reference`` (default: today in the context's zone). The slot moves
        to the previous or next weekday when its start crosses local midnight.
        """
        dates = week_dates(reference or _today(ctx))
        local: list[WeeklyAvailabilitySlot] = []
        for slot in slots:
            anchor = dates[slot.day_of_week].isoformat()
            start = from_utc_date_time(anchor, slot.start_time, ctx.zone)
            end = from_utc_date_time(anchor, slot.end_time, ctx.zone)
            if start is None or end is None:
                # Unparseable times are kept verbatim on their original day.
                local.append(slot)
                continue
            start_date, start_time = start
            day = canonical_day_of(date.fromisoformat(start_date))
            if end[1] <= start_time:
                logger.warning(
                    "weekly_slot_wraps_local_midnight",
                    extra={"day": day, "start": start_time, "end": end[1]},
                )
            local.append(replace(slot, day_of_week=day, start_time=start_time, end_time=end[1]))
        return cls(local)

    def to_utc_buckets(
        self,
        ctx: LocaleContext,
        reference: date | None = None,
    ) -> dict[int, list[TimeInterval]]:
        """Seven UTC-weekday buckets of UTC intervals for the outbound payloads.

        Intervals that are not complete HH:MM pairs are left out; callers
        gate on is_complete before persisting.
        """
        dates = week_dates(reference or _today(ctx))
        buckets: dict[int, list[TimeInterval]] = {day: [] for day in DAYS}
        for slot in self._slots:
            anchor = dates[slot.day_of_week].isoformat()
            start = to_utc_date_time(anchor, slot.start_time, ctx.zone)
            end = to_utc_date_time(anchor, slot.end_time, ctx.zone)
            if start is None or end is None:
                continue
            utc_day = canonical_day_of(date.fromisoformat(start[0]))
            buckets[utc_day].append(TimeInterval(start[1], end[1]))
        return buckets

    # ------------------------------------------------------------------

    def _flat_index(self, day: int, index: int) -> int:
        _check_day(day)
        occurrence = -1
        for flat, slot in enumerate(self._slots):
            if slot.day_of_week != day:
                continue
            occurrence += 1
            if occurrence == index:
                return flat
        raise IndexError(f"day {day} has no interval at position {index}")


def _check_day(day: int) -> None:
    if not isinstance(day, int) or not 0 <= day <= 6:
        raise ValueError(f"day must be a canonical index 0-6, got {day!r}")


def _today(ctx: LocaleContext) -> date:
    return datetime.now(ctx.zone).date()
