from App.models import Track, User
from App.database import db
from App.exceptions import ForbiddenError, NotFoundError
import logging

logger = logging.getLogger(__name__)


def create_track(name, grade_id, instructor_id, coordinator_id=None, description=None, order=None):
    instructor = db.session.get(User, instructor_id)
    if not instructor or not instructor.is_instructor():
        raise ValueError("instructor_id must reference a user with the instructor role")

    track = Track(
        name=name,
        grade_id=grade_id,
        instructor_id=instructor_id,
        coordinator_id=coordinator_id,
        description=description,
        order=order,
    )
    db.session.add(track)
    db.session.commit()
    logger.info(f"Created track {name} for instructor {instructor.email}")
    return track


def get_track(track_id):
    return db.session.get(Track, track_id)


def get_tracks_for_user(user, grade_id=None):
    """
    Tracks visible to ``user``.

    Instructors only see the tracks they teach and coordinators the ones
    they coordinate; every other role sees all tracks.
    """
    query = Track.query
    if grade_id:
        query = query.filter_by(grade_id=grade_id)
    if user.role == 'instructor':
        query = query.filter_by(instructor_id=user.id)
    elif user.role == 'coordinator':
        query = query.filter_by(coordinator_id=user.id)
    elif user.role == 'student':
        query = query.filter_by(is_active=True)
    return query.order_by(Track.order, Track.name).all()


def require_assigned_track(track_id, instructor_id):
    """Return the track, or raise when it is missing or taught by someone else."""
    track = get_track(track_id)
    if not track:
        raise NotFoundError("Track not found")
    if not track.is_instructed_by(instructor_id):
        logger.warning(
            'Instructor not assigned to track',
            extra={'event': 'track_assignment_denied', 'track_id': track_id, 'instructor_id': instructor_id},
        )
        raise ForbiddenError("You are not assigned to this track")
    return track
