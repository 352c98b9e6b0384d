from functools import wraps
from flask import current_app, request
from flask_jwt_extended import current_user, verify_jwt_in_request

from App.exceptions import ForbiddenError, UnauthorizedError


def role_required(*roles):
    """
    Require a valid JWT whose user holds one of ``roles``.

    Failures are raised as domain errors and rendered as JSON by the
    blueprint error handler.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            if not current_user:
                raise UnauthorizedError("Unauthorized")
            if roles and current_user.role not in roles:
                current_app.logger.warning(
                    'Role check failed',
                    extra={
                        'event': 'security_forbidden',
                        'path': request.path,
                        'role': current_user.role,
                        'required': list(roles),
                    },
                )
                raise ForbiddenError("Forbidden")
            return f(*args, **kwargs)
        return decorated_function
    return decorator


login_required = role_required()
instructor_required = role_required('instructor')
student_required = role_required('student')
schedule_manager_required = role_required('manager', 'ceo')
