"""Tests for active hours and local calendar arithmetic."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from lattice.core.localtime import ActiveHours, LocalCalendar, parse_active_hours

TORONTO = ZoneInfo("America/Toronto")


class TestActiveHours:
    def test_valid_range_unchanged(self):
        assert ActiveHours(9, 17).clamped() == ActiveHours(9, 17)

    def test_end_before_start_clamped_to_one_hour(self):
        assert ActiveHours(17, 9).clamped() == ActiveHours(17, 18)

    def test_equal_bounds_clamped(self):
        assert ActiveHours(10, 10).clamped() == ActiveHours(10, 11)

    def test_late_start_runs_to_midnight(self):
        assert ActiveHours(23, 5).clamped() == ActiveHours(23, 24)

    def test_out_of_range_hours(self):
        assert ActiveHours(-3, 30).clamped() == ActiveHours(0, 24)

    def test_contains_hour(self):
        hours = ActiveHours(9, 17)
        assert hours.contains_hour(9) is True
        assert hours.contains_hour(16) is True
        assert hours.contains_hour(17) is False

    def test_format(self):
        assert ActiveHours(9, 17).format() == "09:00-17:00"


class TestParseActiveHours:
    def test_clock_format(self):
        assert parse_active_hours("08:00-18:00") == ActiveHours(8, 18)

    def test_bare_hours(self):
        assert parse_active_hours("9-17") == ActiveHours(9, 17)

    def test_inverted_range_is_clamped(self):
        assert parse_active_hours("18:00-09:00") == ActiveHours(18, 19)

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_active_hours("morning")


class TestRoundUp:
    @pytest.fixture
    def cal(self):
        return LocalCalendar()

    def test_exact_boundary_not_advanced(self, cal):
        dt = datetime(2025, 1, 15, 9, 30)
        assert cal.round_up(dt) == dt

    def test_rounds_to_next_quarter(self, cal):
        assert cal.round_up(datetime(2025, 1, 15, 9, 1)) == datetime(2025, 1, 15, 9, 15)

    def test_rounds_across_hour(self, cal):
        assert cal.round_up(datetime(2025, 1, 15, 9, 50)) == datetime(2025, 1, 15, 10, 0)

    def test_seconds_count(self, cal):
        assert cal.round_up(datetime(2025, 1, 15, 9, 0, 30)) == datetime(2025, 1, 15, 9, 15)

    def test_rounds_across_midnight(self, cal):
        assert cal.round_up(datetime(2025, 1, 15, 23, 55)) == datetime(2025, 1, 16, 0, 0)


class TestAtHour:
    def test_same_day(self):
        cal = LocalCalendar()
        assert cal.at_hour(datetime(2025, 1, 15, 6, 40), 9) == datetime(2025, 1, 15, 9, 0)

    def test_next_day(self):
        cal = LocalCalendar()
        assert cal.at_hour(datetime(2025, 1, 31, 18, 0), 9, days=1) == datetime(2025, 2, 1, 9, 0)

    def test_hour_24_is_next_midnight(self):
        cal = LocalCalendar()
        assert cal.at_hour(datetime(2025, 1, 15, 23, 10), 24) == datetime(2025, 1, 16, 0, 0)

    def test_skipped_wall_time_moves_forward(self):
        cal = LocalCalendar(TORONTO)
        # 02:00 does not exist on 2025-03-09 in Toronto
        result = cal.at_hour(datetime(2025, 3, 9, 0, 30, tzinfo=TORONTO), 2)
        assert (result.hour, result.minute) == (3, 0)
        assert result.utcoffset() == timedelta(hours=-4)


class TestDaylightSaving:
    def test_shift_across_spring_forward_uses_elapsed_time(self):
        cal = LocalCalendar(TORONTO)
        start = datetime(2025, 3, 9, 1, 30, tzinfo=TORONTO)
        result = cal.shift(start, 60)
        assert (result.hour, result.minute) == (3, 30)

    def test_shift_across_fall_back_uses_elapsed_time(self):
        cal = LocalCalendar(TORONTO)
        start = datetime(2025, 11, 2, 0, 30, tzinfo=TORONTO)
        result = cal.shift(start, 120)
        assert (result.hour, result.minute) == (1, 30)
        assert result.utcoffset() == timedelta(hours=-5)

    def test_repeated_hour_has_distinct_keys(self):
        cal = LocalCalendar(TORONTO)
        first = datetime(2025, 11, 2, 1, 30, tzinfo=TORONTO)
        second = datetime(2025, 11, 2, 1, 30, fold=1, tzinfo=TORONTO)
        assert cal.hour_key(first) != cal.hour_key(second)

    def test_instant_is_utc(self):
        cal = LocalCalendar(TORONTO)
        dt = datetime(2025, 1, 15, 9, 0, tzinfo=TORONTO)
        assert cal.instant(dt) == datetime(2025, 1, 15, 14, 0, tzinfo=timezone.utc)
        assert cal.instant(dt).tzinfo is timezone.utc

    def test_local_converts_other_zones(self):
        cal = LocalCalendar(TORONTO)
        utc = datetime(2025, 1, 15, 14, 0, tzinfo=timezone.utc)
        assert cal.local(utc).hour == 9
