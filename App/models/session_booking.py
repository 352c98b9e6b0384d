import uuid
from App.database import db
from App.utils.time_utils import utc_now

LIVE_BOOKING_STATUSES = ('confirmed', 'completed')


class SessionBooking(db.Model):
    __tablename__ = 'session_bookings'

    id = db.Column(db.String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    availability_id = db.Column(db.String(36), db.ForeignKey('instructor_availabilities.id', ondelete='CASCADE'), nullable=False, index=True)
    student_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    track_id = db.Column(db.String(36), nullable=False, index=True)
    session_id = db.Column(db.String(36))
    status = db.Column(db.String(20), nullable=False, default='confirmed')
    student_notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('availability_id', 'student_id', name='uq_booking_availability_student'),
        db.CheckConstraint("status IN ('confirmed', 'completed', 'cancelled')", name='check_valid_booking_status'),
    )

    student = db.relationship('User')

    def __init__(self, availability_id, student_id, track_id, student_notes=None, status='confirmed'):
        self.availability_id = availability_id
        self.student_id = student_id
        self.track_id = track_id
        self.student_notes = student_notes
        self.status = status

    def to_dict(self):
        return {
            'id': self.id,
            'availabilityId': self.availability_id,
            'studentId': self.student_id,
            'trackId': self.track_id,
            'status': self.status,
            'studentNotes': self.student_notes,
            'student': {
                'id': self.student.id,
                'name': self.student.name,
                'email': self.student.email,
            } if self.student else None,
        }
