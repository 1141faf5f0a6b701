"""Booking-window preferences and their client-side validation."""

from __future__ import annotations

from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from availability_primitives.types import SettingsValidationError


class UserSettings(BaseModel):
    """Partial or complete booking-window settings as sent to the backend."""

    max_days_to_book: int | None = Field(default=None, ge=0)
    min_days_to_book: int | None = Field(default=None, ge=0)
    delay_between_meetings: int | None = Field(default=None, ge=0, description="Minutes")
    timezone: str | None = None

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("timezone must not be empty")
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown IANA timezone {value!r}") from None
        return value

    @model_validator(mode="after")
    def _window_order(self) -> UserSettings:
        if (
            self.min_days_to_book is not None
            and self.max_days_to_book is not None
            and self.min_days_to_book > self.max_days_to_book
        ):
            raise ValueError(
                f"min_days_to_book ({self.min_days_to_book}) must not exceed "
                f"max_days_to_book ({self.max_days_to_book})"
            )
        return self

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def build_user_settings(
    form: Mapping[str, Any], default_timezone: str | None = None
) -> UserSettings:
    """Validate raw form values into UserSettings.

    Blank numeric fields are omitted. A blank or missing timezone falls back
    to ``default_timezone`` (the device zone). Raises SettingsValidationError
    listing every problem found.
    """
    data = {key: _blank_to_none(form.get(key)) for key in UserSettings.model_fields}
    if data["timezone"] is None and default_timezone:
        data["timezone"] = default_timezone
    if isinstance(data["timezone"], str):
        data["timezone"] = data["timezone"].strip()

    try:
        return UserSettings.model_validate(data)
    except ValidationError as exc:
        errors = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err["loc"])
            message = err["msg"].removeprefix("Value error, ")
            errors.append(f"{location}: {message}" if location else message)
        raise SettingsValidationError(errors) from exc


def require_timezone(settings: UserSettings) -> None:
    """Onboarding cannot finish without a timezone."""
    if not settings.timezone:
        raise SettingsValidationError(["timezone: Timezone is required"])
