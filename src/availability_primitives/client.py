"""HTTP client for the calendar endpoints of the scheduling backend."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import quote

import httpx
from pydantic import SecretStr

from availability_primitives.config import Settings
from availability_primitives.loaders import exceptions_from_payload, weekly_slots_from_payload
from availability_primitives.preferences import UserSettings, build_user_settings
from availability_primitives.types import (
    ExceptionDate,
    SettingsValidationError,
    TimeInterval,
    WeeklyAvailabilitySlot,
)
from availability_primitives.weekday import from_canonical

logger = logging.getLogger(__name__)

API_ROUTE_DOMAIN = "/api/v1/calendar"


class BackendError(Exception):
    """Base error for backend request failures."""


class AuthenticationError(BackendError):
    """Raised when no token is available to authenticate a request."""


class BackendAuthError(BackendError):
    """Raised when backend rejects authentication."""


class BackendNotFoundError(BackendError):
    """Raised when backend resource is not found."""


class BackendConnectionError(BackendError):
    """Raised when backend connection fails."""


class BackendRequestError(BackendError):
    """Raised for non-auth backend errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


def _secret_value(value: SecretStr | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, SecretStr):
        return value.get_secret_value()
    return str(value)


def _error_detail(response: httpx.Response) -> str | None:
    """The backend's own message, if the error body carries one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in ("message", "detail"):
        if isinstance(body.get(key), str) and body[key]:
            return body[key]
    errors = body.get("errors")
    if isinstance(errors, dict) and errors:
        return ", ".join(str(v) for v in errors.values())
    return None


def _unwrap_data(body: Any) -> Any:
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        return body["data"]
    return body


class CalendarClient:
    """Token-bearing client for weekly availability, exceptions and settings.

    Day indexes passed in and returned are canonical (0=Sunday); the
    configured weekday convention is applied only on the wire.
    """

    def __init__(
        self,
        settings: Settings,
        http: httpx.AsyncClient | None = None,
        token: SecretStr | str | None = None,
    ) -> None:
        self.settings = settings
        self._token = token if token is not None else settings.api_token
        self.http = http or httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=httpx.Timeout(settings.request_timeout),
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> CalendarClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def call(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        token = _secret_value(self._token).strip()
        if not token:
            raise AuthenticationError("No authentication token found")

        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        try:
            response = await self.http.request(
                method,
                f"{API_ROUTE_DOMAIN}{path}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            raise BackendConnectionError(f"backend_timeout: Request to {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise BackendConnectionError(f"backend_connection_failed: {exc}") from exc

        if response.status_code in {401, 403}:
            raise BackendAuthError(_error_detail(response) or "backend_auth_failed")
        if response.status_code == 404:
            raise BackendNotFoundError(_error_detail(response) or "backend_not_found")
        if response.status_code >= 400:
            detail = _error_detail(response)
            if not detail:
                detail = (
                    "Server error. Please try again later."
                    if response.status_code >= 500
                    else f"backend_error_{response.status_code}"
                )
            raise BackendRequestError(detail, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return {"status_code": response.status_code, "text": response.text}

    # ------------------------------------------------------------------
    # Weekly availability
    # ------------------------------------------------------------------

    async def get_weekly_availability(self) -> list[WeeklyAvailabilitySlot]:
        """UTC slots with canonical weekdays."""
        body = await self.call("GET", "/availability")
        return weekly_slots_from_payload(body, self.settings.weekday_convention)

    async def add_weekly_availability(
        self, day_of_week: int, intervals: list[TimeInterval]
    ) -> Any:
        """Replace the full (UTC) interval set of one weekday."""
        data = {
            "day_of_week": from_canonical(day_of_week, self.settings.weekday_convention),
            "intervals": [iv.as_payload() for iv in intervals],
        }
        return await self.call("POST", "/intervals", json=data)

    # ------------------------------------------------------------------
    # Exception dates
    # ------------------------------------------------------------------

    async def get_exception_dates(self) -> list[ExceptionDate]:
        """UTC exception records, keyed by date."""
        body = await self.call("GET", "/exceptions")
        return exceptions_from_payload(body)

    async def add_exception_date(
        self,
        date: str,
        interval: TimeInterval | None,
        is_full_day: bool,
        is_available: bool,
    ) -> Any:
        """Create one exception. Times must already be UTC."""
        if not date:
            raise ValueError("Exception date is required")
        data: dict[str, Any] = {
            "exception_date": date,
            "is_full_day": is_full_day,
            "is_available": is_available,
        }
        if not is_full_day:
            if interval is None or not (interval.start_time and interval.end_time):
                raise ValueError(
                    "Start and end times are required for non-full-day exceptions"
                )
            data["start_time"] = interval.start_time
            data["end_time"] = interval.end_time
        return await self.call("POST", "/exceptions", json=data)

    async def delete_exception_date(self, exception_id: str) -> Any:
        encoded = quote(str(exception_id), safe="")
        return await self.call("POST", f"/exceptions/{encoded}/delete")

    # ------------------------------------------------------------------
    # Settings and onboarding
    # ------------------------------------------------------------------

    async def get_user_settings(self, default_timezone: str | None = None) -> UserSettings:
        """Stored settings, normalised the same way as form input.

        A blank stored timezone falls back to ``default_timezone``. A body
        that fails validation raises BackendRequestError.
        """
        body = _unwrap_data(await self.call("GET", "/settings"))
        try:
            return build_user_settings(body if isinstance(body, dict) else {}, default_timezone)
        except SettingsValidationError as exc:
            logger.warning("user_settings_invalid", extra={"errors": exc.errors})
            raise BackendRequestError(f"Invalid settings from backend: {exc}") from exc

    async def upsert_user_settings(
        self,
        settings: UserSettings | Mapping[str, Any],
        default_timezone: str | None = None,
    ) -> Any:
        """Validate, then send. Invalid settings never reach the network."""
        if not isinstance(settings, UserSettings):
            settings = build_user_settings(settings, default_timezone)
        return await self.call("POST", "/settings", json=settings.to_payload())

    async def get_onboarding_status(self) -> bool:
        body = _unwrap_data(await self.call("GET", "/onboarding/check"))
        return bool(isinstance(body, dict) and body.get("completed"))
