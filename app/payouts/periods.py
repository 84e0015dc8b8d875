"""
Weekly settlement period computation.

A period runs from the cutoff day 00:00:00 UTC through the day before the
next cutoff at 23:59:59.999999 UTC. With the default Wednesday cutoff a run
on Wednesday 00:05 covers the previous Wednesday through yesterday (Tuesday).
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

PERIOD_LENGTH = timedelta(days=7)
END_OF_PERIOD = timedelta(microseconds=1)
WEDNESDAY = 3


def to_python_weekday(day_of_week: int) -> int:
    """Convert 0 = Sunday numbering to datetime.weekday() (0 = Monday)."""
    return (day_of_week - 1) % 7


def weekly_period(now: datetime, cutoff_day_of_week: int = WEDNESDAY) -> tuple[datetime, datetime]:
    """
    Return (period_start, period_end) of the last completed period before now.

    Example:
        >>> weekly_period(datetime(2025, 1, 8, 0, 5, tzinfo=UTC))
        (datetime(2025, 1, 1, 0, 0, tzinfo=UTC), datetime(2025, 1, 7, 23, 59, 59, 999999, tzinfo=UTC))
    """
    now = now.astimezone(UTC)
    today = datetime(now.year, now.month, now.day, tzinfo=UTC)
    days_since_cutoff = (today.weekday() - to_python_weekday(cutoff_day_of_week)) % 7
    current_cutoff = today - timedelta(days=days_since_cutoff)

    period_start = current_cutoff - PERIOD_LENGTH
    period_end = current_cutoff - END_OF_PERIOD
    return period_start, period_end
