"""Tests for exception reconciliation, de-duplication and the UTC boundary.

Test data loaded from: data/fixtures/scenarios/reconcile.json
"""

from __future__ import annotations

import pytest

from conftest import load_scenarios, make_context, make_exception
from availability_primitives.exceptions import (
    dedupe_exceptions,
    exception_to_utc,
    localize_exception,
    localize_exceptions,
    neutralizing_exception,
    reconcile,
)
from availability_primitives.types import ExceptionDate

_scenarios = load_scenarios("reconcile")


class TestReconcile:

    @pytest.mark.parametrize("spec", _scenarios, ids=lambda s: s["id"])
    def test_dates(self, spec):
        result = reconcile(
            [make_exception(e) for e in spec["original"]],
            [make_exception(e) for e in spec["current"]],
        )
        assert sorted(e.date for e in result.to_add) == spec["expected_add"], spec["notes"]
        assert sorted(e.date for e in result.to_remove) == spec["expected_remove"], spec["notes"]
        assert result.to_update == ()

    @pytest.mark.parametrize("spec", _scenarios, ids=lambda s: s["id"])
    def test_add_and_remove_disjoint(self, spec):
        result = reconcile(
            [make_exception(e) for e in spec["original"]],
            [make_exception(e) for e in spec["current"]],
        )
        assert not {e.date for e in result.to_add} & {e.date for e in result.to_remove}

    def test_removed_record_keeps_server_id(self):
        result = reconcile([ExceptionDate("2024-01-01", id="s1")], [])
        assert result.to_remove[0].id == "s1"

    def test_empty_result(self):
        assert reconcile([], []).is_empty


class TestDetectUpdates:

    def test_changed_fields_reported_with_original_id(self):
        original = [ExceptionDate("2024-01-02", "10:00", "11:00", True, id="s2")]
        current = [ExceptionDate("2024-01-02", "10:00", "12:00", True)]
        result = reconcile(original, current, detect_updates=True)
        assert result.to_add == ()
        assert result.to_remove == ()
        assert result.to_update == (ExceptionDate("2024-01-02", "10:00", "12:00", True, id="s2"),)

    def test_unchanged_not_reported(self):
        records = [ExceptionDate("2024-01-02", is_available=True, id="s2")]
        assert reconcile(records, list(records), detect_updates=True).is_empty

    def test_availability_flip_is_an_update(self):
        result = reconcile(
            [ExceptionDate("2024-01-02", is_available=False, id="s2")],
            [ExceptionDate("2024-01-02", is_available=True, id="s2")],
            detect_updates=True,
        )
        assert len(result.to_update) == 1


class TestDedupe:

    def test_exact_duplicates_collapse_first_kept(self):
        first = ExceptionDate("2024-01-02", "09:00", "10:00", True, id="a")
        second = ExceptionDate("2024-01-02", "09:00", "10:00", True, id="b")
        assert dedupe_exceptions([first, second]) == [first]

    def test_same_date_different_times_kept(self):
        records = [
            ExceptionDate("2024-01-02", "09:00", "10:00", True),
            ExceptionDate("2024-01-02", "11:00", "12:00", True),
            ExceptionDate("2024-01-02"),
        ]
        assert dedupe_exceptions(records) == records

    def test_availability_distinguishes(self):
        records = [ExceptionDate("2024-01-02"), ExceptionDate("2024-01-02", is_available=True)]
        assert len(dedupe_exceptions(records)) == 2

    def test_order_preserved(self):
        a, b = ExceptionDate("2024-01-05"), ExceptionDate("2024-01-01")
        assert dedupe_exceptions([a, b, a]) == [a, b]


class TestNeutralizing:

    def test_working_day_becomes_available(self, weekdays_schedule):
        record = neutralizing_exception(ExceptionDate("2024-01-09", id="x"), weekdays_schedule)
        assert record == ExceptionDate("2024-01-09", is_available=True)
        assert record.is_full_day

    def test_day_off_becomes_unavailable(self, weekdays_schedule):
        record = neutralizing_exception(
            ExceptionDate("2024-01-13", "10:00", "14:00", True), weekdays_schedule,
        )
        assert record == ExceptionDate("2024-01-13", is_available=False)

    def test_bad_date(self, weekdays_schedule):
        assert neutralizing_exception(ExceptionDate("bad"), weekdays_schedule) is None


class TestUtcBoundary:

    def test_localize_timed(self):
        ctx = make_context("Asia/Kolkata")
        record = ExceptionDate("2024-01-10", "06:30", "07:30", False, id="e2")
        assert localize_exception(record, ctx) == ExceptionDate(
            "2024-01-10", "12:00", "13:00", False, id="e2",
        )

    def test_localize_full_day_keeps_nulls(self):
        ctx = make_context("America/New_York")
        record = ExceptionDate("2024-01-09", None, None, True)
        assert localize_exception(record, ctx) == record

    def test_to_utc_anchored_on_own_date(self):
        ctx = make_context("America/New_York")
        record = make_exception({"date": "2024-07-04", "start_time": "09:00", "end_time": "10:00"})
        assert exception_to_utc(record, ctx) == ExceptionDate("2024-07-04", "13:00", "14:00")

    def test_to_utc_full_day_stays_null(self):
        ctx = make_context("Asia/Kolkata")
        record = ExceptionDate("2024-01-09", "10:00", None)
        result = exception_to_utc(record, ctx)
        assert result.start_time is None and result.end_time is None

    def test_round_trip(self):
        ctx = make_context("Europe/Berlin")
        records = [
            ExceptionDate("2024-01-10", "08:00", "09:30"),
            ExceptionDate("2024-07-10", "08:00", "09:30", True),
            ExceptionDate("2024-01-11"),
        ]
        utc = [exception_to_utc(r, ctx) for r in records]
        assert localize_exceptions(utc, ctx) == records
