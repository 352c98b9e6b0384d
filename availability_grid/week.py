"""Canonical week boundaries shared by the server and the grid client."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union

DateLike = Union[date, datetime]


def js_weekday(value: DateLike) -> int:
    """Day of week with Sunday as 0, the convention used by slot rows."""

    return (value.weekday() + 1) % 7


def week_start_for(value: DateLike, week_reset_day: int = 0) -> date:
    """Return the most recent ``week_reset_day`` on or before ``value``.

    Args:
        value: Any date (a datetime is truncated to its date).
        week_reset_day: 0=Sunday ... 6=Saturday.
    """

    if not 0 <= week_reset_day <= 6:
        raise ValueError("week_reset_day must be in the range [0, 6]")
    if isinstance(value, datetime):
        value = value.date()
    days_back = (js_weekday(value) - week_reset_day + 7) % 7
    return value - timedelta(days=days_back)


def shift_week(week_start: date, weeks: int, week_reset_day: int = 0) -> date:
    """Move ``weeks`` weeks forward (or back) and re-anchor on the reset day."""

    return week_start_for(week_start + timedelta(days=7 * weeks), week_reset_day)
