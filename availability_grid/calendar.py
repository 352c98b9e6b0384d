"""Instructor-facing controller around :class:`AvailabilityGrid`.

``AvailabilityCalendar`` owns the selected track and week, keeps the grid in
step with the server and turns every failure into the ``error`` string a
front end shows. None of its public operations raise.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import GridError, ValidationError
from .grid import AvailabilityGrid
from .week import shift_week, week_start_for

logger = logging.getLogger(__name__)

SAVE_FAILED = "Failed to save availability"
CONFIRM_FAILED = "Failed to confirm availability"
LOAD_FAILED = "Failed to load availability"
TRACKS_FAILED = "Failed to load tracks"
NO_KEY = "Select a track and a week first"
NO_SLOTS = "Select at least one time slot"
ALL_CONFIRMED = "All selected time slots are already confirmed"
BUSY = "Another request is still in progress"

Key = Tuple[Optional[str], Optional[date]]


class AvailabilityCalendar:
    """State of one instructor's weekly availability screen.

    Args:
        api: Object with the :class:`~availability_grid.client.AvailabilityApi`
            methods (``get_settings``, ``get_tracks``, ``get_availability``,
            ``save_availability``, ``confirm_availability``).
        instructor_id: Only tracks taught by this user are offered.
        guard_stale: Send the last read ``version`` with confirm so the server
            refuses to lock a slot set that changed since it was loaded.
        today: Clock used to pick the current week.
    """

    def __init__(
        self,
        api: Any,
        instructor_id: str,
        guard_stale: bool = False,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.api = api
        self.instructor_id = instructor_id
        self.guard_stale = guard_stale
        self._today = today or date.today

        self.tracks: List[Dict[str, Any]] = []
        self.selected_track_id: Optional[str] = None
        self.week_reset_day = 0
        self.week_start_date: Optional[date] = None
        self.grid = AvailabilityGrid.empty()
        self.last_version: Optional[str] = None
        self.last_confirmed_count: Optional[int] = None

        self.loading = False
        self.saving = False
        self.confirming = False
        self.error: Optional[str] = None
        self.success_message: Optional[str] = None

    # Key ---------------------------------------------------------------------

    @property
    def key(self) -> Key:
        return (self.selected_track_id, self.week_start_date)

    @property
    def busy(self) -> bool:
        return self.loading or self.saving or self.confirming

    def _clear_messages(self) -> None:
        self.error = None
        self.success_message = None

    def load_settings(self) -> None:
        """Read the week reset day once and move to the current week."""

        try:
            settings = self.api.get_settings()
            week_reset_day = int(settings.get("weekResetDay", 0))
            if not 0 <= week_reset_day <= 6:
                raise ValueError(f"weekResetDay {week_reset_day} is out of range")
        except (GridError, ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.warning("Schedule settings unavailable, weeks start on Sunday: %s", exc)
            week_reset_day = 0
        self.week_reset_day = week_reset_day
        self.week_start_date = week_start_for(self._today(), self.week_reset_day)

    def load_tracks(self) -> None:
        try:
            tracks = self.api.get_tracks()
        except GridError as exc:
            logger.warning("Could not load tracks: %s", exc)
            self.error = str(exc) or TRACKS_FAILED
            return
        self.tracks = [track for track in tracks if track.get("instructorId") == self.instructor_id]
        if self.tracks and self.selected_track_id is None:
            self.selected_track_id = self.tracks[0]["id"]

    def open(self) -> None:
        """Settings, tracks, then the first track's current week."""

        self.load_settings()
        self.load_tracks()
        self.initialize()

    def select_track(self, track_id: str) -> None:
        self.selected_track_id = track_id
        self._clear_messages()
        self.initialize()

    def set_week(self, value: date) -> None:
        """Jump to the week containing ``value`` (re-anchored on the reset day)."""

        if isinstance(value, datetime):
            value = value.date()
        self.week_start_date = week_start_for(value, self.week_reset_day)
        self._clear_messages()
        self.initialize()

    def navigate_week(self, weeks: int) -> None:
        if self.week_start_date is None:
            self.week_start_date = week_start_for(self._today(), self.week_reset_day)
        self.week_start_date = shift_week(self.week_start_date, weeks, self.week_reset_day)
        self._clear_messages()
        self.initialize()

    # Server round trips ------------------------------------------------------

    def _fetch_and_reconcile(self, key: Key) -> bool:
        """Load ``key`` from the server and rebuild the grid.

        The result is dropped when the calendar moved to another key while
        the request was in flight. Raises :class:`GridError` on failure.
        """

        track_id, week_start = key
        body = self.api.get_availability(track_id, week_start)
        if self.key != key:
            logger.info("Discarding availability for %s, calendar moved to %s", key, self.key)
            return False
        self.grid.reconcile(body.get("availability", []))
        self.last_version = body.get("version")
        return True

    def initialize(self) -> bool:
        """Rebuild the grid from the server for the current key.

        Returns ``True`` when the grid now reflects the server. On failure the
        grid is left empty, since cells of the previous key must not leak into
        this one.
        """

        key = self.key
        self.grid = AvailabilityGrid.empty()
        self.last_version = None
        if key[0] is None or key[1] is None:
            return False

        self.loading = True
        try:
            return self._fetch_and_reconcile(key)
        except GridError as exc:
            logger.warning("Could not load availability for %s: %s", key, exc)
            self.error = str(exc) or LOAD_FAILED
            return False
        finally:
            self.loading = False

    # Cell gestures -----------------------------------------------------------

    def toggle_slot(self, day: int, hour: int) -> bool:
        return self.grid.toggle(day, hour)

    def begin_drag(self, day: int, hour: int) -> bool:
        return self.grid.begin_drag(day, hour)

    def drag_over(self, day: int, hour: int) -> bool:
        return self.grid.drag_over(day, hour)

    def end_drag(self) -> None:
        self.grid.end_drag()

    def drag_select(self, cells) -> int:
        return self.grid.paint_drag(cells)

    # Mutations ---------------------------------------------------------------

    def _check_ready(self) -> Key:
        if self.busy:
            raise ValidationError(BUSY)
        key = self.key
        if key[0] is None or key[1] is None:
            raise ValidationError(NO_KEY)
        return key

    def save(self) -> bool:
        """Submit every pending cell as the complete desired set.

        The grid keeps its local selection when the request fails; the
        server-owned flags are only ever taken from a fresh read.
        """

        try:
            key = self._check_ready()
            if not self.grid.has_pending():
                raise ValidationError(NO_SLOTS)
        except ValidationError as exc:
            self.error = str(exc)
            return False

        self._clear_messages()
        self.saving = True
        try:
            result = self.api.save_availability(key[0], key[1], self.grid.pending_slots())
        except GridError as exc:
            logger.info("Availability save failed for %s: %s", key, exc)
            self.success_message = None
            self.error = str(exc) or SAVE_FAILED
            self.saving = False
            return False
        self.success_message = result.get("message") or "Availability saved"
        try:
            self._reload_after_write(key)
        finally:
            self.saving = False
        return True

    def confirm(self) -> bool:
        """Lock the saved slots of the current key. There is no undo."""

        try:
            key = self._check_ready()
            if not self.grid.selected_cells():
                raise ValidationError(NO_SLOTS)
            if not self.grid.has_pending():
                raise ValidationError(ALL_CONFIRMED)
        except ValidationError as exc:
            self.error = str(exc)
            return False

        self._clear_messages()
        self.confirming = True
        try:
            result = self.api.confirm_availability(
                key[0],
                key[1],
                expected_version=self.last_version if self.guard_stale else None,
            )
        except GridError as exc:
            logger.info("Availability confirm failed for %s: %s", key, exc)
            self.success_message = None
            self.error = str(exc) or CONFIRM_FAILED
            self.confirming = False
            return False
        self.last_confirmed_count = int(result.get("confirmedCount", 0))
        self.success_message = (
            f"Confirmed {self.last_confirmed_count} time slots. They can no longer be changed."
        )
        try:
            self._reload_after_write(key)
        finally:
            self.confirming = False
        return True

    def _reload_after_write(self, key: Key) -> None:
        # The write already committed; a failed reload leaves the success message in place.
        try:
            self._fetch_and_reconcile(key)
        except GridError as exc:
            logger.info("Availability reload after write failed for %s: %s", key, exc)
            self.error = str(exc) or LOAD_FAILED
