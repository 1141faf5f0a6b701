"""Weekday index mapping: the one seam between numbering conventions.

Internally every day index is canonical: 0=Sunday .. 6=Saturday.
Backend payloads use either that (``sunday0``) or a one-based
Monday-first numbering (``monday1``: 1=Monday .. 7=Sunday).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Mapping

from babel.core import Locale, UnknownLocaleError

DAY_FIELDS = ("day_of_week", "weekday", "day", "dayIndex")

_ENGLISH_NAMES = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)


class Convention(str, Enum):
    SUNDAY0 = "sunday0"
    MONDAY1 = "monday1"


@dataclass(frozen=True)
class DayInfo:
    """A weekday for display: canonical id, 3-letter tag, full label."""

    id: int
    name: str
    label: str


def to_canonical(weekday: int, convention: Convention | str) -> int:
    """Backend weekday number -> canonical 0=Sunday index."""
    convention = Convention(convention)
    if convention is Convention.SUNDAY0:
        if not 0 <= weekday <= 6:
            raise ValueError(f"sunday0 weekday out of range: {weekday}")
        return weekday
    if not 1 <= weekday <= 7:
        raise ValueError(f"monday1 weekday out of range: {weekday}")
    return weekday % 7


def from_canonical(day: int, convention: Convention | str) -> int:
    """Canonical 0=Sunday index -> backend weekday number."""
    convention = Convention(convention)
    if not 0 <= day <= 6:
        raise ValueError(f"canonical day out of range: {day}")
    if convention is Convention.SUNDAY0:
        return day
    return day or 7


def canonical_day_of(d: date) -> int:
    """Canonical index of a calendar date (``date.weekday()`` is 0=Monday)."""
    return (d.weekday() + 1) % 7


def resolve_day_field_with_name(record: Mapping[str, Any]) -> tuple[str, int] | None:
    """Find the first parseable day field in a heterogeneous record.

    Precedence follows DAY_FIELDS. Booleans and non-integral values are
    skipped rather than coerced.
    """
    for name in DAY_FIELDS:
        if name not in record:
            continue
        raw = record[name]
        if isinstance(raw, bool) or raw is None:
            continue
        if isinstance(raw, int):
            return name, raw
        if isinstance(raw, float) and raw.is_integer():
            return name, int(raw)
        if isinstance(raw, str):
            try:
                return name, int(raw.strip())
            except ValueError:
                continue
    return None


def resolve_day_field(record: Mapping[str, Any]) -> int | None:
    """Raw numeric day value of a record, or None so the caller can skip it."""
    found = resolve_day_field_with_name(record)
    return None if found is None else found[1]


def ordered_days(locale_tag: str | None, first_weekday: int = 0) -> list[DayInfo]:
    """Seven DayInfo entries starting at ``first_weekday`` (canonical index).

    Labels are localised when the locale is known, English otherwise.
    """
    labels = list(_ENGLISH_NAMES)
    short = [label[:3] for label in labels]
    try:
        locale = Locale.parse((locale_tag or "en-US").replace("-", "_"))
        wide = locale.days["format"]["wide"]
        abbreviated = locale.days["format"]["abbreviated"]
        # Babel keys days 0=Monday .. 6=Sunday.
        for babel_day in range(7):
            canonical = (babel_day + 1) % 7
            labels[canonical] = wide[babel_day]
            short[canonical] = abbreviated[babel_day]
    except (UnknownLocaleError, ValueError, TypeError):
        pass

    return [
        DayInfo(
            id=(first_weekday + offset) % 7,
            name=short[(first_weekday + offset) % 7][:3].upper(),
            label=labels[(first_weekday + offset) % 7],
        )
        for offset in range(7)
    ]
