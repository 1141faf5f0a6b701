"""Device locale detection into an explicit LocaleContext."""

from __future__ import annotations

import locale as _stdlib_locale
import logging
import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from babel.core import Locale, UnknownLocaleError
from tzlocal import get_localzone_name

from availability_primitives.config import Settings
from availability_primitives.types import LocaleContext

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en-US"
DEFAULT_ZONE = "UTC"


def detect_time_zone() -> str:
    """IANA name of the device zone, or UTC when it cannot be determined."""
    try:
        name = get_localzone_name()
    except (ZoneInfoNotFoundError, LookupError, ValueError):
        logger.warning("time_zone_detection_failed", exc_info=True)
        return DEFAULT_ZONE
    return name or DEFAULT_ZONE


def detect_locale_tag() -> str:
    tag, _encoding = _stdlib_locale.getlocale()
    if not tag or tag in ("C", "POSIX"):
        return DEFAULT_LOCALE
    return tag.replace("_", "-")


def locale_clock_and_week(locale_tag: str) -> tuple[bool, int]:
    """(uses 24-hour clock, first weekday as canonical index) for a locale.

    Unknown locales default to a 24-hour clock and Sunday.
    """
    try:
        loc = Locale.parse(locale_tag.replace("-", "_"))
    except (UnknownLocaleError, ValueError, TypeError):
        return True, 0
    # Quoted literals such as fr-CA's 'h' separator are not hour fields.
    pattern = re.sub(r"'[^']*'", "", loc.time_formats["short"].pattern)
    uses_24h = "h" not in pattern and "K" not in pattern
    # Babel numbers days 0=Monday.
    first_weekday = (loc.first_week_day + 1) % 7
    return uses_24h, first_weekday


def build_locale_context(settings: Settings | None = None) -> LocaleContext:
    """Query the device once and freeze the answer; settings override detection."""
    settings = settings or Settings()
    locale_tag = settings.locale_tag or detect_locale_tag()
    time_zone = settings.time_zone or detect_time_zone()
    try:
        ZoneInfo(time_zone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown_time_zone_fallback_utc", extra={"time_zone": time_zone})
        time_zone = DEFAULT_ZONE

    uses_24h, first_weekday = locale_clock_and_week(locale_tag)
    if settings.uses_24_hour_clock is not None:
        uses_24h = settings.uses_24_hour_clock

    return LocaleContext(
        uses_24_hour_clock=uses_24h,
        time_zone=time_zone,
        locale_tag=locale_tag,
        first_weekday=first_weekday,
    )
