from .user import User, ROLES
from .track import Track
from .instructor_availability import InstructorAvailability
from .schedule_settings import ScheduleSettings
from .session_booking import SessionBooking
