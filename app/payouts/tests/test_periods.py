"""
Tests for weekly settlement period computation.
"""

from datetime import UTC, datetime, timedelta, timezone

from payouts.periods import to_python_weekday, weekly_period


class TestToPythonWeekday:
    def test_sunday_maps_to_six(self):
        assert to_python_weekday(0) == 6

    def test_wednesday_maps_to_two(self):
        assert to_python_weekday(3) == 2


class TestWeeklyPeriod:
    """Tests for weekly_period()."""

    def test_wednesday_run_covers_previous_week(self):
        """The 00:05 Wednesday run should cover last Wednesday through Tuesday."""
        start, end = weekly_period(datetime(2025, 1, 8, 0, 5, tzinfo=UTC))

        assert start == datetime(2025, 1, 1, tzinfo=UTC)
        assert end == datetime(2025, 1, 7, 23, 59, 59, 999999, tzinfo=UTC)

    def test_mid_week_run_returns_last_completed_period(self):
        """A Friday run should still return the period that closed on Tuesday."""
        start, end = weekly_period(datetime(2025, 1, 10, 15, 30, tzinfo=UTC))

        assert start == datetime(2025, 1, 1, tzinfo=UTC)
        assert end == datetime(2025, 1, 7, 23, 59, 59, 999999, tzinfo=UTC)

    def test_period_is_one_week_minus_one_microsecond(self):
        start, end = weekly_period(datetime(2025, 3, 19, 0, 5, tzinfo=UTC))

        assert end - start == timedelta(days=7) - timedelta(microseconds=1)

    def test_custom_cutoff_day(self):
        """A Monday cutoff should produce Monday-to-Sunday periods."""
        start, end = weekly_period(datetime(2025, 1, 6, 10, 0, tzinfo=UTC), cutoff_day_of_week=1)

        assert start == datetime(2024, 12, 30, tzinfo=UTC)
        assert end == datetime(2025, 1, 5, 23, 59, 59, 999999, tzinfo=UTC)

    def test_non_utc_input_is_converted_first(self):
        """Wednesday 07:00 in UTC+8 is still Tuesday in UTC."""
        manila = timezone(timedelta(hours=8))

        start, end = weekly_period(datetime(2025, 1, 8, 7, 0, tzinfo=manila))

        assert start == datetime(2024, 12, 25, tzinfo=UTC)
        assert end == datetime(2024, 12, 31, 23, 59, 59, 999999, tzinfo=UTC)
