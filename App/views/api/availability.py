from flask import request
from flask_jwt_extended import current_user
import logging

from App.views.api import api
from App.views.api.utils import api_success, api_error, domain_error, get_json_body
from App.middleware import instructor_required
from App.controllers import availability as availability_controller
from App.exceptions import AvailabilityError

logger = logging.getLogger(__name__)


@api.route('/instructor/availability', methods=['GET'])
@instructor_required
def get_instructor_availability():
    """
    Fetch the current instructor's availability slots

    Query params:
        trackId: optional track filter
        weekStartDate: optional YYYY-MM-DD week filter

    Returns:
        200: {"availability": [...], "version": "<digest>"}
    """
    try:
        rows, version = availability_controller.get_availability(
            current_user.id,
            track_id=request.args.get('trackId'),
            week_start_date=request.args.get('weekStartDate'),
        )
        return api_success({"availability": [row.to_dict() for row in rows], "version": version})
    except AvailabilityError as e:
        return domain_error(e)
    except Exception:
        logger.exception("Error fetching availability")
        return api_error("Internal server error", status_code=500)


@api.route('/instructor/availability', methods=['POST'])
@instructor_required
def save_instructor_availability():
    """
    Save the full selected set of unconfirmed slots for a track/week

    Expected JSON body:
    {
        "trackId": "string",
        "weekStartDate": "YYYY-MM-DD",
        "slots": [{"dayOfWeek": 0, "startHour": 13, "endHour": 14}]
    }

    Responses:
      201: slots saved
      400: validation error
      403: not assigned to the track
      404: track not found
      409: concurrent modification
    """
    data, error = get_json_body()
    if error:
        return error

    try:
        summary = availability_controller.save_availability(
            current_user.id,
            data.get('trackId'),
            data.get('weekStartDate'),
            data.get('slots'),
        )
        return api_success(dict(message="Availability slots saved successfully", **summary), status_code=201)
    except AvailabilityError as e:
        logger.info(f"Availability save rejected for {current_user.id}: {e.message}")
        return domain_error(e)
    except Exception:
        logger.exception("Error creating availability")
        return api_error("Internal server error", status_code=500)


@api.route('/instructor/availability/confirm', methods=['PUT'])
@instructor_required
def confirm_instructor_availability():
    """
    Lock the week's unconfirmed slots. There is no way back.

    Expected JSON body:
    {
        "trackId": "string",
        "weekStartDate": "YYYY-MM-DD",
        "expectedVersion": "optional digest from GET"
    }

    Responses:
      200: {"message": ..., "confirmedCount": n}
      400: missing fields
      403: not assigned to the track
      404: track not found or nothing to confirm
      409: expectedVersion is stale
    """
    data, error = get_json_body()
    if error:
        return error

    try:
        confirmed_count = availability_controller.confirm_availability(
            current_user.id,
            data.get('trackId'),
            data.get('weekStartDate'),
            expected_version=data.get('expectedVersion'),
        )
        return api_success({
            "message": f"Confirmed {confirmed_count} availability slots for the week",
            "confirmedCount": confirmed_count,
        })
    except AvailabilityError as e:
        logger.info(f"Availability confirm rejected for {current_user.id}: {e.message}")
        return domain_error(e)
    except Exception:
        logger.exception("Error confirming availability")
        return api_error("Internal server error", status_code=500)
