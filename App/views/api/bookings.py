from flask import request
from flask_jwt_extended import current_user
import logging

from App.views.api import api
from App.views.api.utils import api_success, api_error, domain_error, get_json_body
from App.middleware import student_required
from App.controllers import booking as booking_controller
from App.exceptions import AvailabilityError

logger = logging.getLogger(__name__)


@api.route('/student/book-session', methods=['POST'])
@student_required
def book_session():
    """
    Book a confirmed availability slot

    Expected JSON body:
    {
        "availabilityId": "string",
        "studentNotes": "optional"
    }
    """
    data, error = get_json_body()
    if error:
        return error

    try:
        booking = booking_controller.book_session(
            current_user.id,
            data.get('availabilityId'),
            student_notes=data.get('studentNotes'),
        )
        return api_success({"message": "Session booked successfully", "booking": booking.to_dict()}, status_code=201)
    except AvailabilityError as e:
        return domain_error(e)
    except Exception:
        logger.exception("Error booking session")
        return api_error("Internal server error", status_code=500)


@api.route('/student/book-session', methods=['DELETE'])
@student_required
def cancel_session_booking():
    try:
        booking_controller.cancel_booking(current_user.id, request.args.get('bookingId'))
        return api_success({"message": "Booking cancelled successfully"})
    except AvailabilityError as e:
        return domain_error(e)
    except Exception:
        logger.exception("Error cancelling booking")
        return api_error("Internal server error", status_code=500)
