"""Shared test fixtures and data loading for availability-primitives.

Schedules, scenarios and recorded backend bodies live under data/fixtures/.
This module loads them and provides factories, day constants and fixtures.

Reference week: Sun 2024-01-07 through Sat 2024-01-13.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
FIXTURES_DIR = Path(__file__).resolve().parent.parent / "data" / "fixtures"
SCENARIOS_DIR = FIXTURES_DIR / "scenarios"
PAYLOADS_DIR = FIXTURES_DIR / "payloads"

BASE_URL = "https://calendar.test"
API = f"{BASE_URL}/api/v1/calendar"


# ---------------------------------------------------------------------------
# Data loaders
# ---------------------------------------------------------------------------
def _load_json(path: Path):
    with open(path) as f:
        return json.load(f)


_reference = _load_json(FIXTURES_DIR / "reference.json")
_schedules = _load_json(FIXTURES_DIR / "schedules.json")

# Day lookup:  DAYS["mon"] → {"date": date(2024, 1, 8), "canonical": 1}
DAYS: dict[str, dict] = {
    d["name"]: {"date": date.fromisoformat(d["date"]), "canonical": d["canonical"]}
    for d in _reference["days"]
}

SUN, MON, TUE, WED, THU, FRI, SAT = range(7)


def day_date(day: str) -> date:
    """Date object for a named day of the reference week."""
    return DAYS[day]["date"]


def load_scenarios(name: str):
    """Load a scenario file from data/fixtures/scenarios/{name}.json."""
    return _load_json(SCENARIOS_DIR / f"{name}.json")


def load_payload(name: str):
    """Load a recorded backend body from data/fixtures/payloads/{name}.json."""
    return _load_json(PAYLOADS_DIR / f"{name}.json")


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
def make_schedule(name: str):
    """Build a WeeklySchedule from schedules.json by name."""
    from availability_primitives.types import WeeklyAvailabilitySlot
    from availability_primitives.weekly import WeeklySchedule

    return WeeklySchedule(
        WeeklyAvailabilitySlot(**slot) for slot in _schedules[name]["slots"]
    )


def make_exception(spec: dict):
    """ExceptionDate from a fixture dict; missing keys take model defaults."""
    from availability_primitives.types import ExceptionDate

    return ExceptionDate(**spec)


def make_context(time_zone: str = "UTC", locale_tag: str = "en-US", uses_24h: bool = True):
    from availability_primitives.types import LocaleContext

    return LocaleContext(
        uses_24_hour_clock=uses_24h, time_zone=time_zone, locale_tag=locale_tag,
    )


def make_settings(**overrides):
    from availability_primitives.config import Settings

    values = {"api_base_url": BASE_URL, "api_token": "tok"}
    values.update(overrides)
    return Settings(**values)


# ---------------------------------------------------------------------------
# pytest fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def weekdays_schedule():
    return make_schedule("weekdays")


@pytest.fixture
def interleaved_schedule():
    return make_schedule("interleaved")


@pytest.fixture
def utc_context():
    return make_context("UTC")

