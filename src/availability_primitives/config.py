"""Configuration for the availability client."""

from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from availability_primitives.weekday import Convention


class Settings(BaseSettings):
    """Runtime settings loaded from environment."""

    api_base_url: str = "http://localhost:8000"
    api_token: SecretStr = SecretStr("")
    request_timeout: float = 30.0
    weekday_convention: Convention = Convention.SUNDAY0

    # Device overrides; empty means detect.
    locale_tag: str = ""
    time_zone: str = ""
    uses_24_hour_clock: bool | None = None

    model_config = SettingsConfigDict(env_prefix="AVAILABILITY_", env_file=".env")
