"""Exception reconciliation: diff two snapshots of exception dates.

Snapshots are plain lists of ExceptionDate. The diff is keyed on ``date``,
never on list position. Times are device-local in memory and UTC at rest;
the helpers at the bottom convert at that boundary.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from availability_primitives.calendar import fallback_availability
from availability_primitives.timefmt import from_utc_time_to_local, to_utc_time_string
from availability_primitives.types import ExceptionDate, LocaleContext, ReconcileResult
from availability_primitives.weekly import WeeklySchedule


def _by_date(records: Iterable[ExceptionDate]) -> dict[str, ExceptionDate]:
    mapping: dict[str, ExceptionDate] = {}
    for record in records:
        if record.date:
            mapping[record.date] = record
    return mapping


def _same_fields(a: ExceptionDate, b: ExceptionDate) -> bool:
    return (a.start_time, a.end_time, a.is_available) == (
        b.start_time, b.end_time, b.is_available,
    )


def reconcile(
    original: Iterable[ExceptionDate],
    current: Iterable[ExceptionDate],
    *,
    detect_updates: bool = False,
) -> ReconcileResult:
    """Compute what to add and remove so the server matches ``current``.

    Both snapshots are mapped by date (last record wins on duplicates).
    Dates present in both are unchanged unless ``detect_updates`` is set,
    in which case records whose times or availability differ are returned
    in ``to_update`` carrying the original's server id.
    """
    orig_map = _by_date(original)
    curr_map = _by_date(current)

    to_add = tuple(e for d, e in curr_map.items() if d not in orig_map)
    to_remove = tuple(e for d, e in orig_map.items() if d not in curr_map)

    to_update: tuple[ExceptionDate, ...] = ()
    if detect_updates:
        to_update = tuple(
            replace(e, id=e.id or orig_map[d].id)
            for d, e in curr_map.items()
            if d in orig_map and not _same_fields(e, orig_map[d])
        )

    return ReconcileResult(to_add=to_add, to_remove=to_remove, to_update=to_update)


def dedupe_exceptions(records: Iterable[ExceptionDate]) -> list[ExceptionDate]:
    """One record per (date, start_time, end_time, is_available), first kept."""
    seen: set[tuple] = set()
    unique: list[ExceptionDate] = []
    for record in records:
        if record.composite_key in seen:
            continue
        seen.add(record.composite_key)
        unique.append(record)
    return unique


def neutralizing_exception(
    exception: ExceptionDate, schedule: WeeklySchedule
) -> ExceptionDate | None:
    """Full-day record that replays the weekly default for ``exception.date``.

    Used to "remove" an exception when no delete is possible. This is a
    best-effort approximation: if the weekly pattern changed since the
    exception was created, the result is not a true inverse.
    Returns None when the date cannot be parsed.
    """
    available = fallback_availability(schedule, exception.date)
    if available is None:
        return None
    return ExceptionDate(date=exception.date, is_available=available)


# ----------------------------------------------------------------------
# UTC boundary
# ----------------------------------------------------------------------

def localize_exception(record: ExceptionDate, ctx: LocaleContext) -> ExceptionDate:
    """UTC-at-rest record -> device-local record (date stays the key)."""
    return replace(
        record,
        start_time=from_utc_time_to_local(record.date, record.start_time, ctx.zone),
        end_time=from_utc_time_to_local(record.date, record.end_time, ctx.zone),
    )


def localize_exceptions(records: Iterable[ExceptionDate], ctx: LocaleContext) -> list[ExceptionDate]:
    return [localize_exception(record, ctx) for record in records]


def exception_to_utc(record: ExceptionDate, ctx: LocaleContext) -> ExceptionDate:
    """Device-local record -> UTC-at-rest record anchored on the same date."""
    if record.is_full_day:
        return replace(record, start_time=None, end_time=None)
    return replace(
        record,
        start_time=to_utc_time_string(record.date, record.start_time, ctx.zone),
        end_time=to_utc_time_string(record.date, record.end_time, ctx.zone),
    )
