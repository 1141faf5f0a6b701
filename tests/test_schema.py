"""Tests for interval and exception validators."""

from __future__ import annotations

import pytest

from availability_primitives.schema import find_overlaps, validate_exception, validate_intervals
from availability_primitives.types import ExceptionDate, TimeInterval


class TestValidateIntervals:

    def test_valid_day(self):
        intervals = [TimeInterval("09:00", "12:00"), TimeInterval("13:00", "17:00")]
        assert validate_intervals(1, intervals) == []

    def test_no_intervals_is_valid(self):
        assert validate_intervals(0, []) == []

    @pytest.mark.parametrize("day", [-1, 7, "1"])
    def test_bad_day(self, day):
        errors = validate_intervals(day, [])
        assert len(errors) == 1
        assert "Invalid day index" in errors[0]

    def test_start_after_end(self):
        errors = validate_intervals(2, [TimeInterval("17:00", "09:00")])
        assert errors == ["Day 2, interval 0: start 17:00 must be before end 09:00"]

    def test_each_bad_field_reported(self):
        errors = validate_intervals(3, [TimeInterval("9", "")])
        assert len(errors) == 2
        assert "start_time '9'" in errors[0]
        assert "end_time ''" in errors[1]

    def test_position_in_message(self):
        errors = validate_intervals(4, [TimeInterval("08:00", "09:00"), TimeInterval("10:00", "10:00")])
        assert errors and errors[0].startswith("Day 4, interval 1:")


class TestFindOverlaps:

    def test_touching_is_not_overlap(self):
        assert find_overlaps([TimeInterval("09:00", "12:00"), TimeInterval("12:00", "17:00")]) == []

    def test_input_order_irrelevant(self):
        a, b = TimeInterval("13:00", "15:00"), TimeInterval("09:00", "14:00")
        assert find_overlaps([a, b]) == [(b, a)]

    def test_contained_interval(self):
        outer, inner = TimeInterval("08:00", "18:00"), TimeInterval("10:00", "11:00")
        assert find_overlaps([outer, inner]) == [(outer, inner)]

    def test_invalid_ignored(self):
        assert find_overlaps([TimeInterval("09:00", "12:00"), TimeInterval("1", "11:00")]) == []


class TestValidateException:

    def test_full_day(self):
        assert validate_exception(ExceptionDate("2024-01-09")) == []

    def test_timed(self):
        assert validate_exception(ExceptionDate("2024-01-09", "10:00", "11:00", True)) == []

    def test_bad_date(self):
        errors = validate_exception(ExceptionDate("2024-13-01"))
        assert errors == ["Invalid date: 2024-13-01"]

    def test_half_set_times(self):
        errors = validate_exception(ExceptionDate("2024-01-09", "10:00", None))
        assert len(errors) == 1
        assert "required" in errors[0]

    def test_reversed_times(self):
        errors = validate_exception(ExceptionDate("2024-01-09", "11:00", "10:00"))
        assert errors == ["Date 2024-01-09: start 11:00 must be before end 10:00"]

    def test_malformed_time(self):
        errors = validate_exception(ExceptionDate("2024-01-09", "10:00", "25:00"))
        assert errors == ["Date 2024-01-09: invalid end_time '25:00'"]
