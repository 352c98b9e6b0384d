import uuid
from App.database import db
from App.utils.time_utils import utc_now


class Track(db.Model):
    __tablename__ = 'tracks'

    id = db.Column(db.String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    grade_id = db.Column(db.String(255), nullable=False, index=True)
    instructor_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    coordinator_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'), index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    order = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    instructor = db.relationship('User', foreign_keys=[instructor_id], backref=db.backref('instructed_tracks', lazy=True))
    coordinator = db.relationship('User', foreign_keys=[coordinator_id])

    def __init__(self, name, grade_id, instructor_id, coordinator_id=None, description=None, order=None, is_active=True):
        self.name = name
        self.grade_id = grade_id
        self.instructor_id = instructor_id
        self.coordinator_id = coordinator_id
        self.description = description
        self.order = order
        self.is_active = is_active

    def is_instructed_by(self, user_id):
        return self.instructor_id == user_id

    def summary(self):
        return {'id': self.id, 'name': self.name, 'gradeId': self.grade_id}

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'gradeId': self.grade_id,
            'instructorId': self.instructor_id,
            'coordinatorId': self.coordinator_id,
            'isActive': self.is_active,
            'order': self.order,
            'instructor': self.instructor.to_dict() if self.instructor else None,
        }

    def __repr__(self):
        return f'<Track {self.name}>'
