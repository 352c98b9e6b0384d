from .user import *
from .auth import *
from .track import *
from .schedule_settings import *
from .availability import *
from .booking import *
from .initialize import *
