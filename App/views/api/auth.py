from flask import request
from flask_jwt_extended import current_user
import logging

from App.views.api import api
from App.views.api.utils import api_success, api_error, get_json_body
from App.middleware import login_required
from App.controllers.auth import login as auth_login

logger = logging.getLogger(__name__)


@api.route('/auth/login', methods=['POST'])
def login():
    """
    Authenticate a user and return a JWT

    Expected JSON body:
    {
        "email": "string",
        "password": "string"
    }
    """
    data, error = get_json_body()
    if error:
        return error

    email = data.get('email')
    password = data.get('password')
    if not email or not password:
        return api_error("Email and password are required", status_code=400)

    token, user = auth_login(email, password)
    if not token:
        logger.info(
            'Login failed',
            extra={'event': 'security_login_failed', 'email': email, 'remote_addr': request.remote_addr},
        )
        return api_error("Invalid email or password", status_code=401)

    return api_success({"token": token, "user": user.to_dict()})


@api.route('/auth/me', methods=['GET'])
@login_required
def me():
    return api_success({"user": current_user.to_dict()})
