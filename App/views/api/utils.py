from flask import jsonify, request

from App.exceptions import AvailabilityError


def api_success(payload=None, status_code=200):
    """
    JSON success response; ``payload`` keys are returned at the top level
    (``{"availability": [...]}``, ``{"message": ..., "confirmedCount": n}``).
    """
    return jsonify(payload if payload is not None else {}), status_code


def api_error(message="An error occurred", errors=None, status_code=400):
    """
    JSON error response of the form ``{"error": message}``

    Args:
        message: Error message to display
        errors: Optional dict/list of detailed errors
        status_code: HTTP status code (default: 400)
    """
    response = {"error": message}
    if errors:
        response["errors"] = errors
    return jsonify(response), status_code


def domain_error(exc: AvailabilityError):
    return api_error(exc.message, errors=exc.errors, status_code=exc.status_code)


def get_json_body():
    """
    Parse the request body as a JSON object.

    Returns:
        tuple: (data, error_response) - data will be None if error
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, api_error("Request body must be a JSON object", status_code=400)
    return data, None
