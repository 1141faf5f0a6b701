"""Time format utilities: HH:MM parsing, UTC <-> local conversion, display.

Every function here is total. Malformed input is passed through unchanged
or mapped to a display sentinel; ``None`` (unset) is never coerced to
``00:00``.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from babel.core import UnknownLocaleError
from babel.dates import format_skeleton

from availability_primitives.types import ExceptionDate

INVALID_DATE = "Invalid date"
INVALID_TIME = "Invalid time"
ALL_DAY = "All day"

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_HHMM_OPT_SECONDS = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(?::[0-5]\d)?$")


def normalize_time_string(raw: str | None) -> str | None:
    """'HH:MM' or 'HH:MM:SS' -> 'HH:MM'. Anything else is returned as-is."""
    if not isinstance(raw, str):
        return raw
    match = _HHMM_OPT_SECONDS.match(raw)
    if not match:
        return raw
    return f"{match.group(1)}:{match.group(2)}"


def is_valid_time(value: str | None) -> bool:
    """True for a complete, zero-padded 24-hour 'HH:MM'."""
    return isinstance(value, str) and _HHMM.match(value) is not None


def format_partial_time(text: str) -> str:
    """Mask live-typed input: keep up to 4 digits, insert ':' after two.

    >>> format_partial_time("930")
    '93:0'
    >>> format_partial_time("09:30")
    '09:30'
    """
    digits = re.sub(r"\D", "", text if isinstance(text, str) else "")[:4]
    if len(digits) <= 2:
        return digits
    return f"{digits[:2]}:{digits[2:]}"


def minutes_of(value: str) -> int:
    """Minutes since midnight for a valid 'HH:MM'. Raises ValueError otherwise."""
    if not is_valid_time(value):
        raise ValueError(f"not an HH:MM time: {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def _zone(tz: ZoneInfo | str) -> ZoneInfo:
    return tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)


def _parse_date(value: str | None) -> date | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _clock(dt: datetime) -> str:
    return f"{dt.hour:02d}:{dt.minute:02d}"


# ----------------------------------------------------------------------
# Local <-> UTC clock time for a calendar date
# ----------------------------------------------------------------------

def to_utc_date_time(
    date_iso: str | None, local_hhmm: str | None, tz: ZoneInfo | str
) -> tuple[str, str] | None:
    """Local wall-clock time on ``date_iso`` -> (UTC date, UTC 'HH:MM').

    The returned date differs from ``date_iso`` when the offset pushes the
    instant across midnight. Returns None for unset or unparseable input.
    """
    d = _parse_date(date_iso)
    local = normalize_time_string(local_hhmm)
    if d is None or not is_valid_time(local):
        return None
    try:
        zone = _zone(tz)
    except (ZoneInfoNotFoundError, ValueError):
        return None
    instant = datetime.combine(d, time.fromisoformat(local), tzinfo=zone)
    utc = instant.astimezone(timezone.utc)
    return utc.date().isoformat(), _clock(utc)


def to_utc_time_string(
    date_iso: str | None, local_hhmm: str | None, tz: ZoneInfo | str
) -> str | None:
    """Local 'HH:MM' on a date -> UTC 'HH:MM'.

    Unset input gives None; malformed input is returned unchanged.
    Use :func:`to_utc_date_time` when the rolled-over date matters.
    """
    if not local_hhmm:
        return None
    converted = to_utc_date_time(date_iso, local_hhmm, tz)
    if converted is None:
        return local_hhmm
    return converted[1]


def from_utc_date_time(
    date_iso: str | None, utc_value: str | None, tz: ZoneInfo | str
) -> tuple[str, str] | None:
    """UTC time on ``date_iso`` (or a full ISO datetime) -> (local date, 'HH:MM')."""
    if not utc_value or not isinstance(utc_value, str):
        return None
    try:
        zone = _zone(tz)
    except (ZoneInfoNotFoundError, ValueError):
        return None

    if "T" in utc_value:
        try:
            instant = datetime.fromisoformat(utc_value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
    else:
        d = _parse_date(date_iso)
        utc_hhmm = normalize_time_string(utc_value)
        if d is None or not is_valid_time(utc_hhmm):
            return None
        instant = datetime.combine(d, time.fromisoformat(utc_hhmm), tzinfo=timezone.utc)

    local = instant.astimezone(zone)
    return local.date().isoformat(), _clock(local)


def from_utc_time_to_local(
    date_iso: str | None, utc_value: str | None, tz: ZoneInfo | str
) -> str | None:
    """UTC 'HH:MM' on a date -> local 'HH:MM'. Malformed input is normalised or passed through."""
    if not utc_value:
        return None
    converted = from_utc_date_time(date_iso, utc_value, tz)
    if converted is None:
        return normalize_time_string(utc_value)
    return converted[1]


# ----------------------------------------------------------------------
# Display
# ----------------------------------------------------------------------

def to_12_hour(value: str) -> str:
    """'13:05' -> '1:05 PM'. Hour 0 is 12 AM, hour 12 is 12 PM."""
    if not is_valid_time(value):
        return value
    hour, minute = (int(part) for part in value.split(":"))
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minute:02d} {suffix}"


def format_display_interval(start: str, end: str, uses_24h: bool) -> str:
    if uses_24h:
        return f"{start} - {end}"
    return f"{to_12_hour(start)} - {to_12_hour(end)}"


def format_exception_interval(exception: ExceptionDate, uses_24h: bool) -> str:
    """Display text for an exception's time range; full-day exceptions read 'All day'."""
    if exception.is_full_day:
        return ALL_DAY
    return format_display_interval(exception.start_time, exception.end_time, uses_24h)


def format_exception_date_for_locale(locale_tag: str | None, iso_date: str | None) -> str:
    """Short localised date such as 'Mon, Jan 1'.

    Falls back to 'YYYY-MM-DD' when the locale cannot be resolved and to
    INVALID_DATE when the date itself cannot be parsed.
    """
    d = _parse_date(iso_date)
    if d is None:
        return INVALID_DATE
    try:
        return format_skeleton(
            "MMMEd",
            datetime.combine(d, time(12, 0)),
            locale=(locale_tag or "en-US").replace("-", "_"),
        )
    except (UnknownLocaleError, ValueError, TypeError):
        return d.isoformat()
