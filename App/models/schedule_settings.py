from App.database import db
from App.utils.time_utils import DAY_NAMES, utc_now


class ScheduleSettings(db.Model):
    """Single-row table holding the academy-wide scheduling rules."""
    __tablename__ = 'schedule_settings'

    id = db.Column(db.Integer, primary_key=True)
    week_reset_day = db.Column(db.Integer, nullable=False, default=0)  # 0=Sunday
    week_reset_hour = db.Column(db.Integer, nullable=False, default=22)
    availability_open_hours = db.Column(db.Integer, nullable=False, default=168)
    next_open_date = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        db.CheckConstraint('week_reset_day >= 0 AND week_reset_day <= 6', name='check_week_reset_day'),
        db.CheckConstraint('week_reset_hour >= 0 AND week_reset_hour <= 23', name='check_week_reset_hour'),
        db.CheckConstraint('availability_open_hours > 0', name='check_positive_open_hours'),
    )

    def __init__(self, week_reset_day=0, week_reset_hour=22, availability_open_hours=168, next_open_date=None):
        self.week_reset_day = week_reset_day
        self.week_reset_hour = week_reset_hour
        self.availability_open_hours = availability_open_hours
        self.next_open_date = next_open_date

    def validate(self):
        """Fail fast before anything reaches the database."""
        if not isinstance(self.week_reset_day, int) or not 0 <= self.week_reset_day <= 6:
            raise ValueError("weekResetDay must be between 0 (Sunday) and 6 (Saturday)")
        if not isinstance(self.week_reset_hour, int) or not 0 <= self.week_reset_hour <= 23:
            raise ValueError("weekResetHour must be between 0 and 23")
        if not isinstance(self.availability_open_hours, int) or self.availability_open_hours < 1:
            raise ValueError("availabilityOpenHours must be a positive number")

    @property
    def week_reset_day_name(self):
        return DAY_NAMES[self.week_reset_day]

    def to_dict(self):
        return {
            'id': self.id,
            'weekResetDay': self.week_reset_day,
            'weekResetHour': self.week_reset_hour,
            'availabilityOpenHours': self.availability_open_hours,
            'nextOpenDate': self.next_open_date.isoformat() if self.next_open_date else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<ScheduleSettings week starts {self.week_reset_day_name}>'
