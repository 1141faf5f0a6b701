"""availability-primitives: weekly availability, exception dates and their reconciliation."""

from availability_primitives.calendar import AvailabilityCalendar, fallback_availability
from availability_primitives.client import (
    AuthenticationError,
    BackendAuthError,
    BackendConnectionError,
    BackendError,
    BackendNotFoundError,
    BackendRequestError,
    CalendarClient,
)
from availability_primitives.config import Settings
from availability_primitives.device import build_locale_context
from availability_primitives.exceptions import (
    dedupe_exceptions,
    exception_to_utc,
    localize_exceptions,
    reconcile,
)
from availability_primitives.persistence import persist_reconciliation, persist_weekly_schedule
from availability_primitives.preferences import UserSettings, build_user_settings
from availability_primitives.session import ExceptionEditingSession, SessionState
from availability_primitives.types import (
    ExceptionDate,
    LocaleContext,
    PersistReport,
    ReconcileResult,
    SettingsValidationError,
    TimeInterval,
    WeeklyAvailabilitySlot,
)
from availability_primitives.weekday import Convention, from_canonical, resolve_day_field, to_canonical
from availability_primitives.weekly import CopySource, WeeklySchedule, group_by_day

__all__ = [
    "AuthenticationError",
    "AvailabilityCalendar",
    "BackendAuthError",
    "BackendConnectionError",
    "BackendError",
    "BackendNotFoundError",
    "BackendRequestError",
    "CalendarClient",
    "Convention",
    "CopySource",
    "ExceptionDate",
    "ExceptionEditingSession",
    "LocaleContext",
    "PersistReport",
    "ReconcileResult",
    "SessionState",
    "Settings",
    "SettingsValidationError",
    "TimeInterval",
    "UserSettings",
    "WeeklyAvailabilitySlot",
    "WeeklySchedule",
    "build_locale_context",
    "build_user_settings",
    "dedupe_exceptions",
    "exception_to_utc",
    "fallback_availability",
    "from_canonical",
    "group_by_day",
    "localize_exceptions",
    "persist_reconciliation",
    "persist_weekly_schedule",
    "reconcile",
    "resolve_day_field",
    "to_canonical",
]
