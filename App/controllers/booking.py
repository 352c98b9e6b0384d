"""
Student bookings against confirmed availability.

Booking is the only writer of ``InstructorAvailability.is_booked``.
"""
import logging

from sqlalchemy.exc import IntegrityError

from App.models import InstructorAvailability, SessionBooking
from App.models.session_booking import LIVE_BOOKING_STATUSES
from App.database import db
from App.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def set_slot_booked(availability_id, is_booked=True):
    """Flip the booked flag of one slot without touching any other column."""
    updated = InstructorAvailability.query.filter_by(id=availability_id).update(
        {'is_booked': is_booked}, synchronize_session=False
    )
    if not updated:
        raise NotFoundError("Availability slot not found")
    db.session.commit()
    return updated


def book_session(student_id, availability_id, student_notes=None):
    if not availability_id:
        raise ValidationError("availabilityId is required")

    availability = db.session.get(InstructorAvailability, availability_id)
    if not availability:
        raise NotFoundError("Availability slot not found")
    if not availability.is_confirmed:
        raise ValidationError("This slot is not yet confirmed by the instructor")

    already_booked = SessionBooking.query.filter_by(
        availability_id=availability_id, student_id=student_id
    ).first()
    if already_booked:
        raise ValidationError("You have already booked this slot")

    booking = SessionBooking(
        availability_id=availability_id,
        student_id=student_id,
        track_id=availability.track_id,
        student_notes=student_notes,
    )
    db.session.add(booking)
    availability.is_booked = True
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("You have already booked this slot")

    logger.info(
        'Session booked',
        extra={'event': 'session_booked', 'booking_id': booking.id, 'availability_id': availability_id},
    )
    return booking


def cancel_booking(student_id, booking_id):
    if not booking_id:
        raise ValidationError("bookingId is required")

    booking = db.session.get(SessionBooking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.student_id != student_id:
        raise ForbiddenError("You can only cancel your own bookings")
    if booking.status == 'completed':
        raise ValidationError("Cannot cancel a completed booking")
    if booking.session_id:
        raise ValidationError("Cannot cancel - instructor has already created a session for this booking")

    availability_id = booking.availability_id
    db.session.delete(booking)
    db.session.flush()

    # Several students may share a slot; it stays booked while any live booking remains
    remaining = SessionBooking.query.filter(
        SessionBooking.availability_id == availability_id,
        SessionBooking.status.in_(LIVE_BOOKING_STATUSES),
    ).count()
    if remaining == 0:
        InstructorAvailability.query.filter_by(id=availability_id).update(
            {'is_booked': False}, synchronize_session=False
        )
    db.session.commit()
    logger.info(f"Booking {booking_id} cancelled, {remaining} bookings remain on slot {availability_id}")
