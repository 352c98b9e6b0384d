import logging

from App.views.api import api
from App.views.api.utils import api_success, api_error, get_json_body
from App.middleware import login_required, schedule_manager_required
from App.controllers import schedule_settings as settings_controller

logger = logging.getLogger(__name__)


@api.route('/settings/schedule', methods=['GET'])
@login_required
def get_schedule_settings():
    """Every authenticated role may read the settings (instructors need the week start)."""
    try:
        settings = settings_controller.get_schedule_settings()
        return api_success({"settings": settings.to_dict()})
    except Exception:
        logger.exception("Error fetching schedule settings")
        return api_error("Internal server error", status_code=500)


@api.route('/settings/schedule', methods=['PUT'])
@schedule_manager_required
def update_schedule_settings():
    """
    Update schedule settings (manager and CEO only)

    Expected JSON body (all fields optional):
    {
        "weekResetDay": 0,
        "weekResetHour": 22,
        "availabilityOpenHours": 168,
        "nextOpenDate": "2026-01-01T00:00:00" | null
    }
    """
    data, error = get_json_body()
    if error:
        return error

    try:
        settings = settings_controller.update_schedule_settings(data)
        return api_success({"message": "Schedule settings updated successfully", "settings": settings.to_dict()})
    except ValueError as e:
        return api_error(str(e), status_code=400)
    except Exception:
        logger.exception("Error updating schedule settings")
        return api_error("Internal server error", status_code=500)
