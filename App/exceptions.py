"""
Domain exceptions raised by the controllers.

Views translate them into JSON error responses using ``status_code``;
anything that is not an ``AvailabilityError`` is treated as a 500.
"""


class AvailabilityError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(AvailabilityError):
    status_code = 400


class UnauthorizedError(AvailabilityError):
    status_code = 401


class ForbiddenError(AvailabilityError):
    status_code = 403


class NotFoundError(AvailabilityError):
    status_code = 404


class ConflictError(AvailabilityError):
    """Concurrent write or stale ``expectedVersion``."""

    status_code = 409
