"""Sequential, best-effort persistence of local edits.

Calls are awaited one at a time so a failure part-way leaves a
deterministic prefix applied. A failed call is logged and the loop moves
on; the report tells the caller to re-fetch. Setting ``cancel`` stops
further calls; calls already sent are not rolled back.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Iterable

from availability_primitives.client import BackendError, CalendarClient
from availability_primitives.exceptions import exception_to_utc, neutralizing_exception
from availability_primitives.schema import validate_exception
from availability_primitives.types import (
    ExceptionDate,
    LocaleContext,
    PersistReport,
    ReconcileResult,
    TimeInterval,
)
from availability_primitives.weekly import WeeklySchedule

logger = logging.getLogger(__name__)


def _cancelled(cancel: asyncio.Event | None, report: PersistReport) -> bool:
    if cancel is not None and cancel.is_set():
        report.cancelled = True
        logger.info(
            "persist_cancelled",
            extra={"applied": len(report.applied), "failed": len(report.failed)},
        )
        return True
    return False


def _outbound_exception(record: ExceptionDate, ctx: LocaleContext) -> ExceptionDate:
    """The UTC form of a local record. Raises ValueError if it is invalid."""
    errors = validate_exception(record)
    if errors:
        raise ValueError("; ".join(errors))
    return exception_to_utc(record, ctx)


async def _send_exception(client: CalendarClient, utc: ExceptionDate) -> None:
    interval = None if utc.is_full_day else TimeInterval(utc.start_time, utc.end_time)
    await client.add_exception_date(utc.date, interval, utc.is_full_day, utc.is_available)


async def _remove_exception(
    client: CalendarClient,
    record: ExceptionDate,
    schedule: WeeklySchedule,
    report: PersistReport,
) -> None:
    if record.id:
        try:
            await client.delete_exception_date(record.id)
        except BackendError as exc:
            logger.warning(
                "exception_delete_failed_fallback_neutralize",
                extra={"date": record.date, "id": record.id},
                exc_info=exc,
            )
        else:
            report.applied.append(f"remove {record.date}")
            return

    # Degraded path: no delete possible, so replay the weekly default as a
    # full-day exception. Not a true inverse of the original exception.
    neutral = neutralizing_exception(record, schedule)
    if neutral is None:
        raise ValueError(f"Invalid date: {record.date}")
    await client.add_exception_date(neutral.date, None, True, neutral.is_available)
    logger.warning(
        "exception_removed_by_neutralizing_write",
        extra={"date": record.date, "is_available": neutral.is_available},
    )
    report.applied.append(f"neutralize {record.date}")
    report.degraded.append(record.date)


async def persist_reconciliation(
    client: CalendarClient,
    result: ReconcileResult,
    schedule: WeeklySchedule,
    ctx: LocaleContext,
    *,
    cancel: asyncio.Event | None = None,
) -> PersistReport:
    """Send adds (in order), then field updates, then removals (in order).

    ``schedule`` is the local weekly pattern, used only by the
    neutralizing fallback for removals.
    """
    report = PersistReport()

    for record in result.to_add:
        if _cancelled(cancel, report):
            return report
        try:
            await _send_exception(client, _outbound_exception(record, ctx))
        except (BackendError, ValueError) as exc:
            logger.error("exception_add_failed", extra={"date": record.date}, exc_info=exc)
            report.failed.append(f"add {record.date}: {exc}")
        else:
            report.applied.append(f"add {record.date}")

    for record in result.to_update:
        if _cancelled(cancel, report):
            return report
        try:
            # Checked before the delete so a bad edit never drops server data.
            utc = _outbound_exception(record, ctx)
            if record.id:
                await client.delete_exception_date(record.id)
            await _send_exception(client, utc)
        except (BackendError, ValueError) as exc:
            logger.error("exception_update_failed", extra={"date": record.date}, exc_info=exc)
            report.failed.append(f"update {record.date}: {exc}")
        else:
            report.applied.append(f"update {record.date}")

    for record in result.to_remove:
        if _cancelled(cancel, report):
            return report
        try:
            await _remove_exception(client, record, schedule, report)
        except (BackendError, ValueError) as exc:
            logger.error("exception_remove_failed", extra={"date": record.date}, exc_info=exc)
            report.failed.append(f"remove {record.date}: {exc}")

    return report


def _with_neighbours(days: Iterable[int]) -> list[int]:
    touched = set()
    for day in days:
        touched.update({(day - 1) % 7, day, (day + 1) % 7})
    return sorted(touched)


async def persist_weekly_schedule(
    client: CalendarClient,
    schedule: WeeklySchedule,
    ctx: LocaleContext,
    *,
    days: Iterable[int] | None = None,
    reference: date | None = None,
    cancel: asyncio.Event | None = None,
) -> PersistReport:
    """Replace the backend's UTC weekday buckets affected by ``days``.

    A local day can spill into the neighbouring UTC weekday, so each edited
    day also rewrites its neighbours; every bucket is computed from the
    whole schedule. Nothing is sent while any contributing day is incomplete.
    """
    report = PersistReport()
    targets = list(range(7)) if days is None else _with_neighbours(days)

    incomplete = [
        day for day in _with_neighbours(targets) if not schedule.is_complete(day)
    ]
    if incomplete:
        for day in incomplete:
            report.failed.extend(schedule.errors_for(day))
        logger.warning("weekly_save_blocked_incomplete", extra={"days": incomplete})
        return report

    buckets = schedule.to_utc_buckets(ctx, reference)
    for day in targets:
        if _cancelled(cancel, report):
            return report
        try:
            await client.add_weekly_availability(day, buckets[day])
        except BackendError as exc:
            logger.error("weekly_save_failed", extra={"day": day}, exc_info=exc)
            report.failed.append(f"day {day}: {exc}")
        else:
            report.applied.append(f"day {day}")
    return report
