from App.controllers.user import create_user
from App.controllers.track import create_track
from App.controllers.schedule_settings import get_schedule_settings
from App.database import reset_db
import logging

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = '123456'

SAMPLE_USERS = [
    ('ceo@andrino-academy.com', 'Academy CEO', 'ceo'),
    ('manager@andrino-academy.com', 'Academy Manager', 'manager'),
    ('coordinator@andrino-academy.com', 'Track Coordinator', 'coordinator'),
    ('instructor@andrino-academy.com', 'Ahmed Instructor', 'instructor'),
    ('instructor2@andrino-academy.com', 'Sara Instructor', 'instructor'),
    ('student@andrino-academy.com', 'Omar Student', 'student'),
]

SAMPLE_TRACKS = [
    # name, grade, instructor email
    ('Scratch Foundations', 'grade-1', 'instructor@andrino-academy.com'),
    ('Python Basics', 'grade-2', 'instructor@andrino-academy.com'),
    ('Web Development', 'grade-3', 'instructor2@andrino-academy.com'),
]


def initialize():
    """Drop everything and seed users, tracks and default schedule settings."""
    logger.info("Starting database initialization")

    reset_db()

    users = {}
    for email, name, role in SAMPLE_USERS:
        users[email] = create_user(email, SAMPLE_PASSWORD, name, role)

    coordinator = users['coordinator@andrino-academy.com']
    for order, (name, grade_id, instructor_email) in enumerate(SAMPLE_TRACKS, start=1):
        create_track(
            name=name,
            grade_id=grade_id,
            instructor_id=users[instructor_email].id,
            coordinator_id=coordinator.id,
            order=order,
        )

    settings = get_schedule_settings()
    logger.info(
        'Database initialized',
        extra={
            'event': 'db_initialized',
            'users': len(users),
            'tracks': len(SAMPLE_TRACKS),
            'week_reset_day': settings.week_reset_day,
        },
    )
