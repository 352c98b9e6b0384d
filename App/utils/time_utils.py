"""Date helpers for the canonical week partitioning of availability."""
from datetime import date, datetime, timezone

from availability_grid.week import js_weekday, week_start_for  # noqa: F401

DATE_FORMAT = '%Y-%m-%d'

# Index matches the JS getDay() convention used on the wire: 0 = Sunday
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def utc_now():
    """Naive UTC timestamp, used for created_at/updated_at columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_week_start(raw):
    """Parse a ``YYYY-MM-DD`` string; raises ValueError for anything else."""
    if isinstance(raw, date) and not isinstance(raw, datetime):
        return raw
    if not isinstance(raw, str):
        raise ValueError("weekStartDate must be a YYYY-MM-DD string")
    return datetime.strptime(raw.strip(), DATE_FORMAT).date()


def format_date(value):
    return value.strftime(DATE_FORMAT) if value else None
