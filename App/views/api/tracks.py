from flask import request
from flask_jwt_extended import current_user
import logging

from App.views.api import api
from App.views.api.utils import api_success, api_error
from App.middleware import login_required
from App.controllers.track import get_tracks_for_user

logger = logging.getLogger(__name__)


@api.route('/tracks', methods=['GET'])
@login_required
def list_tracks():
    """
    Tracks visible to the caller

    Query params:
        gradeId: optional grade filter
    """
    try:
        tracks = get_tracks_for_user(current_user, grade_id=request.args.get('gradeId'))
        return api_success({"data": [track.to_dict() for track in tracks]})
    except Exception:
        logger.exception("Error fetching tracks")
        return api_error("Internal server error", status_code=500)
