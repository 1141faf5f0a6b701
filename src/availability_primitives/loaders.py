"""Normalisation of backend payloads into canonical records.

Backend versions answer with a bare list, or with the list wrapped in an
``entries``, ``data`` or ``exceptions`` object, and name the weekday field
differently. This module is the single place where those shapes are
flattened. Times stay in UTC here; localisation happens in the model layer.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from availability_primitives.timefmt import normalize_time_string
from availability_primitives.types import ExceptionDate, WeeklyAvailabilitySlot
from availability_primitives.weekday import (
    Convention,
    resolve_day_field_with_name,
    to_canonical,
)

logger = logging.getLogger(__name__)

WRAPPER_KEYS = ("entries", "data", "exceptions")


def unwrap_records(payload: Any) -> list[dict]:
    """Return the list of record dicts held by a response body.

    Anything that is not a list or a known wrapper yields an empty list.
    """
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if isinstance(payload, dict):
        for key in WRAPPER_KEYS:
            inner = payload.get(key)
            if isinstance(inner, list):
                return [item for item in inner if isinstance(item, dict)]
            if isinstance(inner, dict):
                nested = unwrap_records(inner)
                if nested:
                    return nested
    return []


def _optional_id(record: dict) -> str | None:
    raw = record.get("id")
    return None if raw is None else str(raw)


def weekly_slots_from_payload(
    payload: Any,
    convention: Convention | str = Convention.SUNDAY0,
) -> list[WeeklyAvailabilitySlot]:
    """Canonical-weekday UTC slots from a weekly availability response.

    Records with no resolvable day, an out-of-range day, or missing or
    non-string times are skipped (and logged) rather than defaulted to a wrong day.
    A ``weekday`` field is always read as the monday1 convention; the
    other day fields follow ``convention``.
    """
    slots: list[WeeklyAvailabilitySlot] = []
    for record in unwrap_records(payload):
        found = resolve_day_field_with_name(record)
        if found is None:
            logger.warning("weekly_record_skipped_no_day", extra={"record": record})
            continue
        field_name, raw_day = found
        record_convention = Convention.MONDAY1 if field_name == "weekday" else convention
        try:
            day = to_canonical(raw_day, record_convention)
        except ValueError:
            logger.warning(
                "weekly_record_skipped_bad_day",
                extra={"field": field_name, "value": raw_day},
            )
            continue

        start = record.get("start_time")
        end = record.get("end_time")
        if not start or not end:
            continue
        if not (isinstance(start, str) and isinstance(end, str)):
            logger.warning(
                "weekly_record_skipped_bad_time",
                extra={"start": start, "end": end, "id": record.get("id")},
            )
            continue
        slots.append(
            WeeklyAvailabilitySlot(
                day_of_week=day,
                start_time=normalize_time_string(start),
                end_time=normalize_time_string(end),
                id=_optional_id(record),
            )
        )
    return slots


def exceptions_from_payload(payload: Any) -> list[ExceptionDate]:
    """UTC exception records from an exception-dates response.

    The date may arrive as ``exception_date`` or ``date`` (possibly with a
    time suffix, which is dropped). Records without a date, or with times
    that are not strings, are skipped.
    """
    records: list[ExceptionDate] = []
    for record in unwrap_records(payload):
        raw_date = record.get("exception_date") or record.get("date")
        if not raw_date or not isinstance(raw_date, str):
            logger.warning("exception_record_skipped_no_date", extra={"record": record})
            continue
        start = record.get("start_time") or None
        end = record.get("end_time") or None
        if record.get("is_full_day"):
            start = end = None
        if any(t is not None and not isinstance(t, str) for t in (start, end)):
            logger.warning(
                "exception_record_skipped_bad_time",
                extra={"date": raw_date, "start": start, "end": end},
            )
            continue
        records.append(
            ExceptionDate(
                date=raw_date[:10],
                start_time=normalize_time_string(start),
                end_time=normalize_time_string(end),
                is_available=bool(record.get("is_available", False)),
                id=_optional_id(record),
            )
        )
    return records


def load_payload_json(path: str | Path) -> Any:
    """Load a recorded backend response body from a JSON file."""
    path = Path(path)
    with open(path) as f:
        return json.load(f)
