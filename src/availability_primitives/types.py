"""Shared types: availability slots, exception dates, locale context, reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

DEFAULT_START = "09:00"
DEFAULT_END = "17:00"


@dataclass(frozen=True)
class TimeInterval:
    """One contiguous [start_time, end_time) interval as HH:MM strings."""

    start_time: str
    end_time: str

    def as_payload(self) -> dict[str, str]:
        return {"start_time": self.start_time, "end_time": self.end_time}


@dataclass(frozen=True)
class WeeklyAvailabilitySlot:
    """One interval of availability on one weekday.

    Invariants:
        - day_of_week is canonical: 0=Sunday .. 6=Saturday
        - start_time < end_time once both are complete HH:MM strings
    """

    day_of_week: int
    start_time: str
    end_time: str
    id: str | None = None

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)


@dataclass(frozen=True)
class ExceptionDate:
    """A single-date override of the weekly pattern.

    ``date`` (YYYY-MM-DD) is the natural key. A ``None`` start/end pair
    means the exception covers the full day.
    """

    date: str
    start_time: str | None = None
    end_time: str | None = None
    is_available: bool = False
    id: str | None = None

    @property
    def is_full_day(self) -> bool:
        return not (self.start_time and self.end_time)

    @property
    def key(self) -> str:
        return self.date

    @property
    def composite_key(self) -> tuple[str, str | None, str | None, bool]:
        return (self.date, self.start_time, self.end_time, self.is_available)


@dataclass(frozen=True)
class LocaleContext:
    """Device locale facts, queried once per screen load and passed explicitly."""

    uses_24_hour_clock: bool = True
    time_zone: str = "UTC"
    locale_tag: str = "en-US"
    # Canonical index (0=Sunday) of the first day shown in a week.
    first_weekday: int = 0

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)


@dataclass(frozen=True)
class ReconcileResult:
    """Exceptions to create and to remove so the server matches ``current``."""

    to_add: tuple[ExceptionDate, ...] = ()
    to_remove: tuple[ExceptionDate, ...] = ()
    # Same date in both snapshots but different fields; only filled on request.
    to_update: tuple[ExceptionDate, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.to_add or self.to_remove or self.to_update)


@dataclass
class PersistReport:
    """Outcome of one sequential persistence pass.

    ``applied`` and ``failed`` hold short descriptions in call order.
    ``degraded`` lists dates removed through a neutralizing write instead
    of a true delete.
    """

    applied: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    degraded: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed and not self.cancelled

    @property
    def error_message(self) -> str | None:
        if self.cancelled:
            return "Save cancelled before all changes were sent"
        if self.failed:
            return f"{len(self.failed)} change(s) failed to save: " + "; ".join(self.failed)
        return None


class SettingsValidationError(ValueError):
    """Raised when booking-window settings fail client-side validation."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Invalid settings: " + "; ".join(errors))
