from flask import Blueprint

from App.exceptions import AvailabilityError

api = Blueprint('api', __name__, url_prefix='/api')

from .utils import domain_error


@api.errorhandler(AvailabilityError)
def _handle_domain_error(exc):
    return domain_error(exc)


# Importing the modules registers their routes on the blueprint
from . import auth, availability, tracks, settings, bookings
