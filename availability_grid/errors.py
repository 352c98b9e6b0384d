"""Errors raised by the grid client."""
from __future__ import annotations

from typing import Optional


class GridError(Exception):
    """Base class; ``str(error)`` is the message shown in the error banner."""


class ValidationError(GridError):
    """A precondition of save/confirm does not hold locally."""


class ApiError(GridError):
    """The server rejected a request or could not be reached.

    ``status_code`` is ``None`` for transport failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_stale(self) -> bool:
        return self.status_code == 409
