import unittest
from datetime import date, datetime

from availability_grid import AvailabilityGrid, HOURS, TimeSlot, js_weekday, shift_week, week_start_for


def _row(day, start, end, booked=False, confirmed=False, row_id=None):
    return {
        'id': row_id or f'{day}-{start}',
        'dayOfWeek': day,
        'startHour': start,
        'endHour': end,
        'isBooked': booked,
        'isConfirmed': confirmed,
    }


class GridUnitTests(unittest.TestCase):

    def test_empty_grid_has_seventy_unselected_cells(self):
        grid = AvailabilityGrid.empty()
        self.assertEqual(len(grid), 70)
        self.assertEqual(HOURS, tuple(range(13, 23)))
        self.assertFalse(grid.selected_cells())
        self.assertFalse(grid.has_pending())
        self.assertIsNone(grid.cell(0, 12))
        self.assertIsNone(grid.cell(7, 13))

    def test_reconcile_marks_half_open_interval(self):
        grid = AvailabilityGrid.from_rows([_row(2, 14, 17, row_id='abc')])

        selected = {(cell.day, cell.hour) for cell in grid.selected_cells()}
        self.assertEqual(selected, {(2, 14), (2, 15), (2, 16)})
        self.assertFalse(grid.cell(2, 17).is_selected)
        self.assertFalse(grid.cell(2, 13).is_selected)
        self.assertEqual(grid.cell(2, 15).availability_id, 'abc')

    def test_reconcile_copies_server_flags(self):
        grid = AvailabilityGrid.from_rows([
            _row(1, 13, 14, booked=True, confirmed=True),
            _row(1, 14, 15),
        ])
        locked = grid.cell(1, 13)
        self.assertTrue(locked.is_booked)
        self.assertTrue(locked.is_confirmed)
        self.assertFalse(locked.is_pending)
        self.assertTrue(grid.cell(1, 14).is_pending)
        self.assertTrue(grid.has_confirmed())

    def test_reconcile_resets_cells_from_a_previous_load(self):
        grid = AvailabilityGrid.from_rows([_row(0, 13, 15, confirmed=True)])
        grid.toggle(3, 20)

        grid.reconcile([_row(4, 22, 23)])

        self.assertEqual([(c.day, c.hour) for c in grid.selected_cells()], [(4, 22)])
        self.assertFalse(grid.has_confirmed())

    def test_reconcile_ignores_hours_outside_the_grid(self):
        grid = AvailabilityGrid.from_rows([_row(5, 11, 14)])
        self.assertEqual([(c.day, c.hour) for c in grid.selected_cells()], [(5, 13)])
        self.assertEqual(len(grid), 70)

    def test_toggle_flips_selection(self):
        grid = AvailabilityGrid.empty()
        self.assertTrue(grid.toggle(0, 13))
        self.assertTrue(grid.cell(0, 13).is_selected)
        self.assertTrue(grid.toggle(0, 13))
        self.assertFalse(grid.cell(0, 13).is_selected)

    def test_toggle_confirmed_cell_is_a_noop(self):
        grid = AvailabilityGrid.from_rows([_row(6, 20, 21, confirmed=True)])
        before = grid.cell(6, 20)

        self.assertFalse(grid.toggle(6, 20))
        self.assertEqual(grid.cell(6, 20), before)

    def test_toggle_unknown_cell_is_a_noop(self):
        grid = AvailabilityGrid.empty()
        self.assertFalse(grid.toggle(0, 23))
        self.assertFalse(grid.toggle(-1, 13))

    def test_pending_slots_are_unit_hours_of_unconfirmed_selection(self):
        grid = AvailabilityGrid.from_rows([
            _row(0, 13, 15),
            _row(1, 16, 17, confirmed=True),
        ])
        self.assertEqual(grid.pending_slots(), [
            {'dayOfWeek': 0, 'startHour': 13, 'endHour': 14},
            {'dayOfWeek': 0, 'startHour': 14, 'endHour': 15},
        ])


class DragUnitTests(unittest.TestCase):

    def test_drag_from_unselected_cell_selects_every_entered_cell(self):
        grid = AvailabilityGrid.empty()
        grid.toggle(1, 14)

        changed = grid.paint_drag([(1, 13), (1, 14), (1, 15)])

        self.assertEqual(changed, 2)
        self.assertTrue(all(grid.cell(1, hour).is_selected for hour in (13, 14, 15)))
        self.assertFalse(grid.is_dragging)

    def test_drag_from_selected_cell_deselects(self):
        grid = AvailabilityGrid.from_rows([_row(2, 13, 17)])

        grid.begin_drag(2, 14)
        grid.drag_over(2, 15)
        grid.drag_over(2, 15)
        grid.end_drag()

        self.assertEqual([c.hour for c in grid.selected_cells()], [13, 16])

    def test_drag_skips_confirmed_cells(self):
        grid = AvailabilityGrid.from_rows([_row(3, 15, 16, confirmed=True)])

        grid.paint_drag([(3, 13), (3, 14), (3, 15), (3, 16)])

        self.assertTrue(grid.cell(3, 15).is_confirmed)
        self.assertEqual(len(grid.pending_cells()), 3)

    def test_drag_cannot_start_on_confirmed_cell(self):
        grid = AvailabilityGrid.from_rows([_row(3, 15, 16, confirmed=True)])

        self.assertFalse(grid.begin_drag(3, 15))
        self.assertFalse(grid.is_dragging)
        self.assertFalse(grid.drag_over(3, 16))
        self.assertFalse(grid.cell(3, 16).is_selected)

    def test_drag_over_without_gesture_does_nothing(self):
        grid = AvailabilityGrid.empty()
        self.assertFalse(grid.drag_over(0, 13))
        self.assertEqual(grid.paint_drag([]), 0)


class TimeSlotUnitTests(unittest.TestCase):

    def test_slot_descriptor(self):
        cell = TimeSlot(day=4, hour=22, is_selected=True)
        self.assertEqual(cell.to_slot(), {'dayOfWeek': 4, 'startHour': 22, 'endHour': 23})
        self.assertFalse(cell.is_saved)
        self.assertTrue(cell.is_pending)


class WeekUnitTests(unittest.TestCase):

    def test_js_weekday_counts_from_sunday(self):
        self.assertEqual(js_weekday(date(2025, 1, 5)), 0)
        self.assertEqual(js_weekday(date(2025, 1, 11)), 6)

    def test_week_start_for_sunday_weeks(self):
        self.assertEqual(week_start_for(date(2025, 1, 8)), date(2025, 1, 5))
        self.assertEqual(week_start_for(date(2025, 1, 5)), date(2025, 1, 5))
        self.assertEqual(week_start_for(datetime(2025, 1, 11, 23, 30)), date(2025, 1, 5))

    def test_week_start_for_custom_reset_day(self):
        # Weeks starting on Wednesday
        self.assertEqual(week_start_for(date(2025, 1, 7), 3), date(2025, 1, 1))
        self.assertEqual(week_start_for(date(2025, 1, 8), 3), date(2025, 1, 8))

    def test_week_start_for_rejects_bad_reset_day(self):
        with self.assertRaises(ValueError):
            week_start_for(date(2025, 1, 5), 7)

    def test_shift_week(self):
        self.assertEqual(shift_week(date(2025, 1, 5), 1), date(2025, 1, 12))
        self.assertEqual(shift_week(date(2025, 1, 5), -1), date(2024, 12, 29))


if __name__ == '__main__':
    unittest.main()
