from typing import Any, Dict, Optional
from datetime import date, datetime
import logging

from App.models import ScheduleSettings
from App.database import db
from App.utils.time_utils import week_start_for, utc_now

logger = logging.getLogger(__name__)

_FIELD_MAP = {
    'weekResetDay': 'week_reset_day',
    'weekResetHour': 'week_reset_hour',
    'availabilityOpenHours': 'availability_open_hours',
}


def get_schedule_settings() -> ScheduleSettings:
    """
    Return the settings row, creating the defaults on first use.

    Returns:
        ScheduleSettings: week starting Sunday, reset at 22:00, open all week
    """
    settings = ScheduleSettings.query.order_by(ScheduleSettings.id).first()
    if settings is None:
        settings = ScheduleSettings()
        db.session.add(settings)
        db.session.commit()
        logger.info("Created default schedule settings")
    return settings


def get_week_reset_day() -> int:
    return get_schedule_settings().week_reset_day


def current_week_start(today: Optional[date] = None) -> date:
    """Canonical start date of the week containing ``today``."""
    return week_start_for(today or utc_now().date(), get_week_reset_day())


def update_schedule_settings(changes: Dict[str, Any]) -> ScheduleSettings:
    """
    Apply a partial update using the wire (camelCase) field names.

    Raises:
        ValueError: when a value is out of range; nothing is written
    """
    settings = get_schedule_settings()

    for wire_name, attribute in _FIELD_MAP.items():
        if wire_name in changes:
            value = changes[wire_name]
            if isinstance(value, bool):
                db.session.rollback()
                raise ValueError(f"{wire_name} must be a number")
            setattr(settings, attribute, value)

    if 'nextOpenDate' in changes:
        raw = changes['nextOpenDate']
        if raw is None:
            settings.next_open_date = None
        else:
            try:
                settings.next_open_date = datetime.fromisoformat(str(raw))
            except ValueError:
                db.session.rollback()
                raise ValueError("nextOpenDate must be a valid date")

    try:
        settings.validate()
    except ValueError:
        db.session.rollback()
        raise

    db.session.commit()
    logger.info(
        'Schedule settings updated',
        extra={'event': 'schedule_settings_updated', 'fields': sorted(changes)},
    )
    return settings
