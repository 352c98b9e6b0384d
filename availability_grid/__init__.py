"""Weekly availability grid for instructors.

The grid state and the calendar controller do not depend on Flask or the
database, so any Python front end (or a test) can drive them against the
``/api`` endpoints through :class:`AvailabilityApi`.
"""

from .calendar import AvailabilityCalendar
from .client import AvailabilityApi
from .errors import ApiError, GridError, ValidationError
from .grid import DAYS_PER_WEEK, HOURS, AvailabilityGrid, TimeSlot
from .week import js_weekday, shift_week, week_start_for

__all__ = [
    "AvailabilityApi",
    "AvailabilityCalendar",
    "AvailabilityGrid",
    "ApiError",
    "DAYS_PER_WEEK",
    "GridError",
    "HOURS",
    "TimeSlot",
    "ValidationError",
    "js_weekday",
    "shift_week",
    "week_start_for",
]
