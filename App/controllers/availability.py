"""
Instructor availability: read, save (full replace of the unconfirmed set)
and confirm (one-way lock) for one (instructor, track, week) key.
"""
import hashlib
import logging

from sqlalchemy.exc import IntegrityError

from App.models import InstructorAvailability
from App.models.instructor_availability import FIRST_HOUR, LAST_START_HOUR, END_OF_DAY_HOUR
from App.database import db
from App.exceptions import ConflictError, NotFoundError, ValidationError
from App.controllers.track import require_assigned_track
from App.controllers.schedule_settings import get_week_reset_day
from App.utils.time_utils import DAY_NAMES, format_date, js_weekday, parse_week_start, utc_now

logger = logging.getLogger(__name__)


def _parse_week_start(raw):
    try:
        return parse_week_start(raw)
    except ValueError:
        raise ValidationError("weekStartDate must be a date in YYYY-MM-DD format")


def _ensure_week_boundary(week_start):
    week_reset_day = get_week_reset_day()
    if js_weekday(week_start) != week_reset_day:
        raise ValidationError(f"weekStartDate must be a {DAY_NAMES[week_reset_day]}")


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def normalize_slots(slots):
    """
    Validate submitted slot descriptors.

    Args:
        slots: list of ``{"dayOfWeek", "startHour", "endHour"}`` dicts

    Returns:
        dict mapping (day_of_week, start_hour) to end_hour; a repeated
        (day, start) pair keeps the last submitted end hour

    Raises:
        ValidationError: on the first malformed slot
    """
    normalized = {}
    for slot in slots:
        if not isinstance(slot, dict):
            raise ValidationError("each slot must be an object with dayOfWeek, startHour and endHour")

        day_of_week = slot.get('dayOfWeek')
        start_hour = slot.get('startHour')
        end_hour = slot.get('endHour')

        if not _is_int(day_of_week) or not 0 <= day_of_week <= 6:
            raise ValidationError("dayOfWeek must be between 0 (Sunday) and 6 (Saturday)")
        if not _is_int(start_hour) or not FIRST_HOUR <= start_hour <= LAST_START_HOUR:
            raise ValidationError("startHour must be between 13 (1pm) and 22 (10pm)")
        if not _is_int(end_hour) or end_hour > END_OF_DAY_HOUR or end_hour <= start_hour:
            raise ValidationError("endHour must be between 14 and 23, and greater than startHour")

        normalized[(day_of_week, start_hour)] = end_hour
    return normalized


def _key_query(instructor_id, track_id, week_start):
    return InstructorAvailability.query.filter(
        InstructorAvailability.instructor_id == instructor_id,
        InstructorAvailability.track_id == track_id,
        InstructorAvailability.week_start_date == week_start,
    )


def _unconfirmed(instructor_id, track_id, week_start):
    return _key_query(instructor_id, track_id, week_start).filter(
        InstructorAvailability.is_confirmed.is_(False)
    )


def slot_set_version(rows):
    """Digest of a slot set; changes whenever a row is added, removed or flipped."""
    digest = hashlib.sha1()
    for row in sorted(rows, key=lambda r: (format_date(r.week_start_date), r.track_id, r.day_of_week, r.start_hour)):
        digest.update(
            f"{row.id}|{row.track_id}|{format_date(row.week_start_date)}|{row.day_of_week}|"
            f"{row.start_hour}|{row.end_hour}|{int(row.is_booked)}|{int(row.is_confirmed)};".encode()
        )
    return digest.hexdigest()


def get_availability(instructor_id, track_id=None, week_start_date=None):
    """
    List an instructor's slots, optionally narrowed to a track and/or week.

    Returns:
        tuple: (rows ordered by week, day and start hour, version digest)
    """
    query = InstructorAvailability.query.filter(InstructorAvailability.instructor_id == instructor_id)
    if track_id:
        query = query.filter(InstructorAvailability.track_id == track_id)
    if week_start_date:
        query = query.filter(InstructorAvailability.week_start_date == _parse_week_start(week_start_date))

    rows = query.order_by(
        InstructorAvailability.week_start_date,
        InstructorAvailability.day_of_week,
        InstructorAvailability.start_hour,
    ).all()
    logger.debug(f"Found {len(rows)} availability slots for instructor {instructor_id} track={track_id} week={week_start_date}")
    return rows, slot_set_version(rows)


def save_availability(instructor_id, track_id, week_start_date, slots):
    """
    Replace the instructor's unconfirmed selection for one track/week.

    The submission is the complete desired set: matching unconfirmed rows
    are kept, missing ones created, and unconfirmed rows left out are
    removed. Confirmed rows are never modified or deleted, and a booked row
    is never removed by omission.

    Returns:
        dict: counts of ``created``, ``kept``, ``removed`` and ``skipped`` slots

    Raises:
        ValidationError, NotFoundError, ForbiddenError, ConflictError
    """
    if not track_id or not week_start_date or slots is None or not isinstance(slots, list):
        raise ValidationError("trackId, weekStartDate, and slots array are required")

    week_start = _parse_week_start(week_start_date)
    require_assigned_track(track_id, instructor_id)
    _ensure_week_boundary(week_start)
    requested = normalize_slots(slots)

    existing = {
        row.slot_key: row
        for row in _key_query(instructor_id, track_id, week_start).with_for_update().all()
    }
    summary = {'created': 0, 'kept': 0, 'removed': 0, 'skipped': 0}
    removable_ids = []

    try:
        # Writes re-check is_confirmed: a confirm may commit between the read and the write
        for slot_key, row in existing.items():
            if row.is_confirmed:
                if slot_key in requested:
                    summary['skipped'] += 1
                continue
            if slot_key in requested:
                if row.end_hour == requested[slot_key]:
                    summary['kept'] += 1
                elif _unconfirmed(instructor_id, track_id, week_start).filter(
                    InstructorAvailability.id == row.id
                ).update(
                    {'end_hour': requested[slot_key], 'updated_at': utc_now()},
                    synchronize_session=False,
                ):
                    summary['kept'] += 1
                else:
                    summary['skipped'] += 1
            elif row.is_booked:
                summary['kept'] += 1
            else:
                removable_ids.append(row.id)

        if removable_ids:
            removed = _unconfirmed(instructor_id, track_id, week_start).filter(
                InstructorAvailability.id.in_(removable_ids),
                InstructorAvailability.is_booked.is_(False),
            ).delete(synchronize_session=False)
            summary['removed'] += removed

        for (day_of_week, start_hour), end_hour in sorted(requested.items()):
            if (day_of_week, start_hour) in existing:
                continue
            db.session.add(InstructorAvailability(
                instructor_id=instructor_id,
                track_id=track_id,
                week_start_date=week_start,
                day_of_week=day_of_week,
                start_hour=start_hour,
                end_hour=end_hour,
            ))
            summary['created'] += 1

        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning(
            'Concurrent availability save rejected',
            extra={'event': 'availability_save_conflict', 'instructor_id': instructor_id,
                   'track_id': track_id, 'week_start_date': format_date(week_start)},
        )
        raise ConflictError("Availability for this week was changed by another request, reload and try again")

    logger.info(
        'Availability saved',
        extra={'event': 'availability_saved', 'instructor_id': instructor_id, 'track_id': track_id,
               'week_start_date': format_date(week_start),
               **{f'slots_{name}': count for name, count in summary.items()}},
    )
    return summary


def confirm_availability(instructor_id, track_id, week_start_date, expected_version=None):
    """
    Lock every unconfirmed slot of the key in a single UPDATE.

    Already-confirmed rows are excluded by the predicate, so repeating the
    call never double-confirms, and ``is_booked`` is left as it is.

    Args:
        expected_version: optional digest from a previous read; when it no
            longer matches, nothing is confirmed

    Returns:
        int: number of slots confirmed by this call

    Raises:
        ValidationError, NotFoundError (nothing to confirm), ForbiddenError, ConflictError
    """
    if not track_id or not week_start_date:
        raise ValidationError("trackId and weekStartDate are required")

    week_start = _parse_week_start(week_start_date)
    require_assigned_track(track_id, instructor_id)
    key_query = _key_query(instructor_id, track_id, week_start)

    if expected_version is not None:
        current_version = slot_set_version(key_query.with_for_update().all())
        if current_version != expected_version:
            db.session.rollback()
            raise ConflictError("Availability changed since it was loaded, reload before confirming")

    confirmed_count = key_query.filter(
        InstructorAvailability.is_confirmed.is_(False)
    ).update(
        {'is_confirmed': True, 'updated_at': utc_now()},
        synchronize_session=False,
    )

    if confirmed_count == 0:
        db.session.rollback()
        if key_query.count() == 0:
            raise NotFoundError("No saved availability slots found. Save your time slots before confirming.")
        raise NotFoundError("All availability slots for this week/track are already confirmed")

    db.session.commit()
    logger.info(
        'Availability confirmed',
        extra={'event': 'availability_confirmed', 'instructor_id': instructor_id, 'track_id': track_id,
               'week_start_date': format_date(week_start), 'confirmed_count': confirmed_count},
    )
    return confirmed_count
