"""HTTP transport for the availability endpoints.

Paths are relative to ``base_url`` (for example ``http://localhost:5000``)
and the responses are the JSON bodies returned by the ``/api`` blueprint.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

from .errors import ApiError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


def _as_date_string(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class AvailabilityApi:
    """Thin client over ``requests.Session`` with Bearer authentication.

    Every method returns the decoded JSON body. Non-2xx responses raise
    :class:`ApiError` with the server's ``error`` message; connection
    problems raise :class:`ApiError` with ``status_code=None``.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.set_token(token)

    def set_token(self, token: str) -> None:
        self.session.headers["Authorization"] = f"Bearer {token}"

    def login(self, email: str, password: str) -> Dict[str, Any]:
        body = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.set_token(body["token"])
        return body

    # Transport ---------------------------------------------------------------

    def _send(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Tuple[int, Any]:
        try:
            resp = self.session.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Availability API unreachable: %s %s (%s)", method, path, exc)
            raise ApiError(f"Could not reach the server: {exc}") from exc
        try:
            body = resp.json()
        except ValueError:
            body = None
        return resp.status_code, body

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        default_error: str = "Request failed",
    ) -> Any:
        status_code, body = self._send(method, path, params=params, json=json)
        if 200 <= status_code < 300:
            return body if body is not None else {}
        message = body.get("error") if isinstance(body, dict) else None
        logger.info("Availability API %s %s returned %s: %s", method, path, status_code, message)
        raise ApiError(message or default_error, status_code=status_code)

    # Endpoints ---------------------------------------------------------------

    def get_settings(self) -> Dict[str, Any]:
        body = self._request("GET", "/api/settings/schedule")
        return (body.get("settings") if isinstance(body, dict) else None) or {}

    def get_tracks(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/tracks").get("data", [])

    def get_availability(self, track_id: str, week_start_date: Any) -> Dict[str, Any]:
        """Returns ``{"availability": [...], "version": "..."}`` for one key."""

        return self._request(
            "GET",
            "/api/instructor/availability",
            params={"trackId": track_id, "weekStartDate": _as_date_string(week_start_date)},
            default_error="Failed to load availability",
        )

    def save_availability(
        self, track_id: str, week_start_date: Any, slots: List[Mapping[str, int]]
    ) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/api/instructor/availability",
            json={
                "trackId": track_id,
                "weekStartDate": _as_date_string(week_start_date),
                "slots": list(slots),
            },
            default_error="Failed to save availability",
        )

    def confirm_availability(
        self, track_id: str, week_start_date: Any, expected_version: Optional[str] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "trackId": track_id,
            "weekStartDate": _as_date_string(week_start_date),
        }
        if expected_version is not None:
            payload["expectedVersion"] = expected_version
        return self._request(
            "PUT",
            "/api/instructor/availability/confirm",
            json=payload,
            default_error="Failed to confirm availability",
        )
