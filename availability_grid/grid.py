"""Pure state of the weekly availability grid.

The grid has one cell per (day, hour) for 7 days and the hours 13..22. Each
cell combines the client-owned ``is_selected`` flag (a pending choice) with
the server-owned ``is_booked``/``is_confirmed`` flags, which only change
through :meth:`AvailabilityGrid.reconcile`.

Cell life cycle::

    UNSELECTED  --toggle/drag-->  SELECTED (unsaved)
    SELECTED    --save-->         SAVED (has availability_id)
    SAVED       --confirm-->      CONFIRMED (immutable to the instructor)
    SAVED       --toggle/drag-->  UNSELECTED (removed on the next save)

Nothing in this module performs I/O.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

DAYS_PER_WEEK = 7
FIRST_HOUR = 13
HOURS_PER_DAY = 10
HOURS: Tuple[int, ...] = tuple(range(FIRST_HOUR, FIRST_HOUR + HOURS_PER_DAY))

CellKey = Tuple[int, int]


@dataclass(frozen=True)
class TimeSlot:
    """One grid cell.

    Args:
        day: 0=Sunday ... 6=Saturday.
        hour: Start hour of the one-hour cell (13..22).
    """

    day: int
    hour: int
    is_selected: bool = False
    is_booked: bool = False
    is_confirmed: bool = False
    availability_id: Optional[str] = None

    @property
    def key(self) -> CellKey:
        return (self.day, self.hour)

    @property
    def is_pending(self) -> bool:
        """Selected but not yet locked; these cells are what a save submits."""

        return self.is_selected and not self.is_confirmed

    @property
    def is_saved(self) -> bool:
        return self.availability_id is not None

    def to_slot(self) -> Dict[str, int]:
        return {"dayOfWeek": self.day, "startHour": self.hour, "endHour": self.hour + 1}


class AvailabilityGrid:
    """Mutable 7x10 grid with the toggle/drag/reconcile transitions."""

    def __init__(self, cells: Optional[Mapping[CellKey, TimeSlot]] = None) -> None:
        self._cells: Dict[CellKey, TimeSlot] = dict(cells) if cells else self._blank_cells()
        self._drag_value: Optional[bool] = None

    @classmethod
    def empty(cls) -> "AvailabilityGrid":
        return cls()

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> "AvailabilityGrid":
        grid = cls()
        grid.reconcile(rows)
        return grid

    @staticmethod
    def _blank_cells() -> Dict[CellKey, TimeSlot]:
        return {
            (day, hour): TimeSlot(day=day, hour=hour)
            for day in range(DAYS_PER_WEEK)
            for hour in HOURS
        }

    # Queries -----------------------------------------------------------------

    def __iter__(self) -> Iterator[TimeSlot]:
        return iter(sorted(self._cells.values(), key=lambda cell: cell.key))

    def __len__(self) -> int:
        return len(self._cells)

    def cell(self, day: int, hour: int) -> Optional[TimeSlot]:
        return self._cells.get((day, hour))

    def selected_cells(self) -> List[TimeSlot]:
        return [cell for cell in self if cell.is_selected]

    def confirmed_cells(self) -> List[TimeSlot]:
        return [cell for cell in self if cell.is_confirmed]

    def pending_cells(self) -> List[TimeSlot]:
        return [cell for cell in self if cell.is_pending]

    def pending_slots(self) -> List[Dict[str, int]]:
        """Unit-hour slot descriptors for every pending cell, in grid order."""

        return [cell.to_slot() for cell in self.pending_cells()]

    def has_pending(self) -> bool:
        return any(cell.is_pending for cell in self._cells.values())

    def has_confirmed(self) -> bool:
        return any(cell.is_confirmed for cell in self._cells.values())

    # Transitions -------------------------------------------------------------

    def _set_selected(self, day: int, hour: int, value: bool) -> bool:
        cell = self._cells.get((day, hour))
        if cell is None or cell.is_confirmed or cell.is_selected == value:
            return False
        self._cells[cell.key] = replace(cell, is_selected=value)
        return True

    def toggle(self, day: int, hour: int) -> bool:
        """Flip one cell; confirmed or unknown cells are left alone.

        Returns ``True`` when the cell changed.
        """

        cell = self._cells.get((day, hour))
        if cell is None or cell.is_confirmed:
            return False
        return self._set_selected(day, hour, not cell.is_selected)

    @property
    def is_dragging(self) -> bool:
        return self._drag_value is not None

    def begin_drag(self, day: int, hour: int) -> bool:
        """Start a paint gesture on ``(day, hour)``.

        The starting cell decides the mode: an unselected cell starts a
        "select" drag, a selected one a "deselect" drag. A drag cannot start
        on a confirmed or unknown cell.
        """

        cell = self._cells.get((day, hour))
        if cell is None or cell.is_confirmed:
            return False
        self._drag_value = not cell.is_selected
        return self._set_selected(day, hour, self._drag_value)

    def drag_over(self, day: int, hour: int) -> bool:
        """Force an entered cell to the drag mode's value (idempotent)."""

        if self._drag_value is None:
            return False
        return self._set_selected(day, hour, self._drag_value)

    def end_drag(self) -> None:
        self._drag_value = None

    def paint_drag(self, cells: Iterable[CellKey]) -> int:
        """Apply a whole gesture: the first cell starts it, the rest are entered.

        Returns the number of cells that changed.
        """

        changed = 0
        iterator = iter(cells)
        first = next(iterator, None)
        if first is None:
            return 0
        try:
            changed += self.begin_drag(*first)
            if self.is_dragging:
                for day, hour in iterator:
                    changed += self.drag_over(day, hour)
        finally:
            self.end_drag()
        return changed

    def reconcile(self, rows: Iterable[Mapping[str, Any]]) -> None:
        """Rebuild every cell from the server's rows.

        All cells are reset first so nothing carries over from an earlier
        track or week. Each row marks the hours of its half-open interval
        ``[startHour, endHour)``; hours outside the grid are ignored.
        """

        cells = self._blank_cells()
        for row in rows:
            day = int(row["dayOfWeek"])
            for hour in range(int(row["startHour"]), int(row["endHour"])):
                if (day, hour) not in cells:
                    continue
                cells[(day, hour)] = TimeSlot(
                    day=day,
                    hour=hour,
                    is_selected=True,
                    is_booked=bool(row.get("isBooked", False)),
                    is_confirmed=bool(row.get("isConfirmed", False)),
                    availability_id=row.get("id"),
                )
        self._cells = cells
        self._drag_value = None

    def snapshot(self) -> Dict[CellKey, TimeSlot]:
        """Copy of the cells; ``TimeSlot`` is immutable so a shallow copy suffices."""

        return dict(self._cells)

    def restore(self, cells: Mapping[CellKey, TimeSlot]) -> None:
        self._cells = dict(cells)
        self._drag_value = None
