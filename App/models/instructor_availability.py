import uuid
from App.database import db
from App.utils.time_utils import format_date, utc_now

# Bookable window: ten one-hour cells from 13:00 to 23:00
FIRST_HOUR = 13
LAST_START_HOUR = 22
END_OF_DAY_HOUR = 23


class InstructorAvailability(db.Model):
    """One hour range an instructor offers for a track in a given week."""
    __tablename__ = 'instructor_availabilities'

    id = db.Column(db.String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    instructor_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    track_id = db.Column(db.String(36), db.ForeignKey('tracks.id', ondelete='CASCADE'), nullable=False, index=True)
    week_start_date = db.Column(db.Date, nullable=False, index=True)
    day_of_week = db.Column(db.Integer, nullable=False)  # 0=Sunday
    start_hour = db.Column(db.Integer, nullable=False)
    end_hour = db.Column(db.Integer, nullable=False)  # exclusive
    is_booked = db.Column(db.Boolean, default=False, nullable=False)
    is_confirmed = db.Column(db.Boolean, default=False, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        db.UniqueConstraint(
            'instructor_id', 'track_id', 'week_start_date', 'day_of_week', 'start_hour',
            name='uq_instructor_track_week_day_hour',
        ),
        db.CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='check_availability_day_of_week'),
        db.CheckConstraint('start_hour >= 13 AND start_hour <= 22', name='check_availability_start_hour'),
        db.CheckConstraint('end_hour > start_hour AND end_hour <= 23', name='check_availability_end_hour'),
        db.Index('idx_availability_key', 'instructor_id', 'track_id', 'week_start_date'),
    )

    track = db.relationship('Track', backref=db.backref('availabilities', lazy=True, cascade='all, delete-orphan', passive_deletes=True))
    bookings = db.relationship('SessionBooking', backref='availability', lazy=True, cascade='all, delete-orphan', passive_deletes=True)

    def __init__(self, instructor_id, track_id, week_start_date, day_of_week, start_hour, end_hour,
                 is_booked=False, is_confirmed=False):
        self.instructor_id = instructor_id
        self.track_id = track_id
        self.week_start_date = week_start_date
        self.day_of_week = day_of_week
        self.start_hour = start_hour
        self.end_hour = end_hour
        self.is_booked = is_booked
        self.is_confirmed = is_confirmed

    @property
    def slot_key(self):
        return (self.day_of_week, self.start_hour)

    def hours(self):
        """Hours covered by this row; ``end_hour`` is exclusive."""
        return range(self.start_hour, self.end_hour)

    def to_dict(self, include_relations=True):
        data = {
            'id': self.id,
            'instructorId': self.instructor_id,
            'trackId': self.track_id,
            'weekStartDate': format_date(self.week_start_date),
            'dayOfWeek': self.day_of_week,
            'startHour': self.start_hour,
            'endHour': self.end_hour,
            'isBooked': self.is_booked,
            'isConfirmed': self.is_confirmed,
        }
        if include_relations:
            data['track'] = self.track.summary() if self.track else None
            data['bookings'] = [booking.to_dict() for booking in self.bookings]
        return data

    def __repr__(self):
        state = 'confirmed' if self.is_confirmed else 'pending'
        return (f'<InstructorAvailability {format_date(self.week_start_date)} day={self.day_of_week} '
                f'{self.start_hour}-{self.end_hour} {state}>')
