"""
End-to-end tests of the instructor calendar: the grid client drives the
real endpoints through the Flask test client.
"""
import pytest
from datetime import date
from unittest.mock import MagicMock

import requests
from flask_jwt_extended import create_access_token

from App.main import create_app
from App.database import db
from App.models import InstructorAvailability
from App.controllers.user import create_user
from App.controllers.track import create_track
from App.controllers.availability import save_availability
from availability_grid import ApiError, AvailabilityApi, AvailabilityCalendar

TODAY = date(2025, 1, 8)  # Wednesday, week starts Sunday 2025-01-05


class FlaskClientApi(AvailabilityApi):
    """AvailabilityApi whose requests go to a Flask test client instead of the network."""

    def __init__(self, client, token):
        super().__init__('http://testserver', token=token)
        self.client = client
        self.calls = []

    def _send(self, method, path, params=None, json=None):
        self.calls.append((method, path))
        response = self.client.open(
            path,
            method=method,
            query_string=params,
            json=json,
            headers={'Authorization': self.session.headers['Authorization']},
        )
        return response.status_code, response.get_json(silent=True)


class TestCalendarEndToEnd:

    @pytest.fixture(autouse=True, scope="function")
    def app_context(self):
        self.app = create_app({
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
            'SECRET_KEY': 'test-secret-key',
            'JWT_SECRET_KEY': 'jwt-test-secret',
        })

        with self.app.app_context():
            db.create_all()
            self.instructor = create_user('instructor@test.com', 'password', 'Instructor', 'instructor')
            self.other_instructor = create_user('other@test.com', 'password', 'Other', 'instructor')
            self.track = create_track('Python Basics', 'grade-1', self.instructor.id, order=1)
            self.second_track = create_track('Scratch', 'grade-1', self.instructor.id, order=2)
            self.other_track = create_track('Web Development', 'grade-2', self.other_instructor.id)

            self.api = FlaskClientApi(self.app.test_client(), create_access_token(identity=self.instructor.id))
            self.calendar = AvailabilityCalendar(self.api, self.instructor.id, today=lambda: TODAY)
            self.calendar.open()

            yield

            db.session.remove()
            db.drop_all()

    def rows(self):
        db.session.expire_all()
        return {
            (r.day_of_week, r.start_hour): r
            for r in InstructorAvailability.query.filter_by(track_id=self.track.id).all()
        }

    def test_open_selects_first_track_and_current_week(self):
        assert self.calendar.week_start_date == date(2025, 1, 5)
        assert [t['id'] for t in self.calendar.tracks] == [self.track.id, self.second_track.id]
        assert self.calendar.selected_track_id == self.track.id
        assert self.calendar.error is None
        assert not self.calendar.grid.selected_cells()

    def test_drag_save_confirm_then_toggle_is_noop(self):
        cal = self.calendar
        cal.drag_select([(0, 13), (0, 14), (0, 15)])

        assert cal.save() is True
        assert cal.error is None
        assert set(self.rows()) == {(0, 13), (0, 14), (0, 15)}
        assert all(cell.is_saved for cell in cal.grid.selected_cells())

        assert cal.confirm() is True
        assert cal.last_confirmed_count == 3
        assert '3' in cal.success_message
        assert all(row.is_confirmed for row in self.rows().values())
        assert len(cal.grid.confirmed_cells()) == 3

        assert cal.toggle_slot(0, 14) is False
        assert cal.grid.cell(0, 14).is_selected
        assert len(self.rows()) == 3

    def test_save_replaces_the_unconfirmed_set(self):
        cal = self.calendar
        for hour in (13, 14, 15):
            cal.toggle_slot(1, hour)
        cal.save()

        cal.toggle_slot(1, 13)
        cal.toggle_slot(1, 15)
        cal.toggle_slot(2, 20)
        cal.save()

        assert set(self.rows()) == {(1, 14), (2, 20)}
        assert {(c.day, c.hour) for c in cal.grid.selected_cells()} == {(1, 14), (2, 20)}

    def test_save_without_selection_sets_error(self):
        calls_before = len(self.api.calls)

        assert self.calendar.save() is False
        assert self.calendar.error == 'Select at least one time slot'
        assert len(self.api.calls) == calls_before

    def test_confirm_with_everything_confirmed_is_rejected_locally(self):
        cal = self.calendar
        cal.toggle_slot(3, 13)
        cal.save()
        cal.confirm()

        assert cal.confirm() is False
        assert cal.error == 'All selected time slots are already confirmed'

    def test_confirm_of_unsaved_selection_surfaces_server_error(self):
        cal = self.calendar
        cal.toggle_slot(3, 13)

        assert cal.confirm() is False
        assert cal.error.startswith('No saved availability slots found')
        assert cal.success_message is None
        assert cal.grid.cell(3, 13).is_selected
        assert not cal.confirming

    def test_loading_reflects_server_state(self):
        save_availability(self.instructor.id, self.track.id, '2025-01-05', [
            {'dayOfWeek': 4, 'startHour': 13, 'endHour': 16},
        ])

        self.calendar.initialize()

        assert [(c.day, c.hour) for c in self.calendar.grid.selected_cells()] == [(4, 13), (4, 14), (4, 15)]
        assert self.calendar.last_version

    def test_switching_track_and_week_does_not_carry_selection(self):
        cal = self.calendar
        cal.toggle_slot(0, 13)
        cal.save()

        cal.select_track(self.second_track.id)
        assert not cal.grid.selected_cells()

        cal.select_track(self.track.id)
        assert cal.grid.cell(0, 13).is_selected

        cal.navigate_week(1)
        assert cal.week_start_date == date(2025, 1, 12)
        assert not cal.grid.selected_cells()

        cal.set_week(date(2025, 1, 9))
        assert cal.week_start_date == date(2025, 1, 5)
        assert cal.grid.cell(0, 13).is_selected

    def test_server_rejection_keeps_local_selection(self):
        cal = self.calendar
        cal.selected_track_id = self.other_track.id
        cal.toggle_slot(5, 18)

        assert cal.save() is False
        assert cal.error == 'You are not assigned to this track'
        assert cal.grid.cell(5, 18).is_selected
        assert not cal.grid.cell(5, 18).is_saved
        assert not cal.saving
        assert InstructorAvailability.query.count() == 0

    def test_guarded_confirm_detects_changes_made_elsewhere(self):
        cal = self.calendar
        cal.guard_stale = True
        cal.toggle_slot(0, 13)
        cal.save()

        save_availability(self.instructor.id, self.track.id, '2025-01-05', [
            {'dayOfWeek': 0, 'startHour': 13, 'endHour': 14},
            {'dayOfWeek': 6, 'startHour': 22, 'endHour': 23},
        ])

        assert cal.confirm() is False
        assert 'reload' in cal.error
        assert not any(row.is_confirmed for row in self.rows().values())

        cal.initialize()
        assert cal.confirm() is True
        assert cal.last_confirmed_count == 2


class TestCalendarFailures:

    def make_calendar(self, api):
        calendar = AvailabilityCalendar(api, 'instructor-1', today=lambda: TODAY)
        calendar.selected_track_id = 'track-1'
        calendar.week_start_date = date(2025, 1, 5)
        return calendar

    def test_settings_failure_defaults_to_sunday(self):
        api = MagicMock()
        api.get_settings.side_effect = ApiError('boom', status_code=500)
        calendar = AvailabilityCalendar(api, 'instructor-1', today=lambda: TODAY)

        calendar.load_settings()

        assert calendar.week_reset_day == 0
        assert calendar.week_start_date == date(2025, 1, 5)

    def test_settings_reset_day_moves_current_week(self):
        api = MagicMock()
        api.get_settings.return_value = {'weekResetDay': 1}
        calendar = AvailabilityCalendar(api, 'instructor-1', today=lambda: TODAY)

        calendar.load_settings()

        assert calendar.week_start_date == date(2025, 1, 6)

    @pytest.mark.parametrize('settings', [{'weekResetDay': 9}, {'weekResetDay': -1}, {'weekResetDay': 'monday'}])
    def test_invalid_reset_day_defaults_to_sunday(self, settings):
        api = MagicMock()
        api.get_settings.return_value = settings
        calendar = AvailabilityCalendar(api, 'instructor-1', today=lambda: TODAY)

        calendar.load_settings()

        assert calendar.week_reset_day == 0
        assert calendar.week_start_date == date(2025, 1, 5)

    def test_settings_body_without_settings_key_defaults_to_sunday(self):
        response = MagicMock(status_code=200)
        response.json.return_value = {'success': True}
        session = MagicMock()
        session.headers = {}
        session.request.return_value = response
        calendar = AvailabilityCalendar(
            AvailabilityApi('http://localhost:5000', token='t', session=session),
            'instructor-1',
            today=lambda: TODAY,
        )

        calendar.load_settings()

        assert calendar.week_reset_day == 0
        assert calendar.week_start_date == date(2025, 1, 5)

    def test_tracks_are_filtered_to_instructor(self):
        api = MagicMock()
        api.get_tracks.return_value = [
            {'id': 't1', 'instructorId': 'someone-else'},
            {'id': 't2', 'instructorId': 'instructor-1'},
        ]
        calendar = AvailabilityCalendar(api, 'instructor-1')

        calendar.load_tracks()

        assert [t['id'] for t in calendar.tracks] == ['t2']
        assert calendar.selected_track_id == 't2'

    def test_transport_failure_during_save(self):
        session = MagicMock()
        session.headers = {}
        session.request.side_effect = requests.ConnectionError('connection refused')
        calendar = self.make_calendar(AvailabilityApi('http://localhost:5000', token='t', session=session))
        calendar.toggle_slot(0, 13)

        assert calendar.save() is False
        assert 'Could not reach the server' in calendar.error
        assert calendar.grid.cell(0, 13).is_selected
        assert not calendar.saving

    def test_server_error_without_message_uses_default(self):
        response = MagicMock(status_code=500)
        response.json.side_effect = ValueError('not json')
        session = MagicMock()
        session.headers = {}
        session.request.return_value = response
        calendar = self.make_calendar(AvailabilityApi('http://localhost:5000', token='t', session=session))
        calendar.toggle_slot(0, 13)

        assert calendar.save() is False
        assert calendar.error == 'Failed to save availability'

        assert calendar.confirm() is False
        assert calendar.error == 'Failed to confirm availability'

    def test_failed_save_does_not_patch_server_flags(self):
        api = MagicMock()
        api.get_availability.return_value = {
            'availability': [{'id': 'a1', 'dayOfWeek': 2, 'startHour': 13, 'endHour': 14,
                              'isBooked': False, 'isConfirmed': False}],
            'version': 'v1',
        }
        api.save_availability.side_effect = ApiError('Conflict', status_code=409)
        calendar = self.make_calendar(api)
        calendar.initialize()
        calendar.toggle_slot(2, 14)
        before = calendar.grid.snapshot()

        assert calendar.save() is False

        assert calendar.grid.snapshot() == before
        assert calendar.error == 'Conflict'

    def test_result_for_abandoned_key_is_discarded(self):
        api = MagicMock()
        calendar = self.make_calendar(api)

        def respond_after_navigation(track_id, week_start_date):
            calendar.selected_track_id = 'track-2'
            return {'availability': [{'id': 'a1', 'dayOfWeek': 0, 'startHour': 13, 'endHour': 14}], 'version': 'v'}

        api.get_availability.side_effect = respond_after_navigation

        assert calendar.initialize() is False
        assert not calendar.grid.selected_cells()
        assert calendar.last_version is None

    def test_busy_calendar_rejects_second_mutation(self):
        api = MagicMock()
        calendar = self.make_calendar(api)
        calendar.toggle_slot(0, 13)
        calendar.saving = True

        assert calendar.confirm() is False
        assert calendar.error == 'Another request is still in progress'
        api.confirm_availability.assert_not_called()

    def test_save_needs_track_and_week(self):
        calendar = AvailabilityCalendar(MagicMock(), 'instructor-1')
        calendar.toggle_slot(0, 13)

        assert calendar.save() is False
        assert calendar.error == 'Select a track and a week first'

    def test_reload_failure_after_save_keeps_success(self):
        api = MagicMock()
        api.save_availability.return_value = {'message': 'Availability saved'}
        api.get_availability.side_effect = ApiError('Failed to load availability', status_code=500)
        calendar = self.make_calendar(api)
        calendar.toggle_slot(0, 13)

        assert calendar.save() is True
        assert calendar.success_message == 'Availability saved'
        assert calendar.error == 'Failed to load availability'
        assert not calendar.saving
        api.save_availability.assert_called_once()

    def test_reload_failure_after_confirm_keeps_success(self):
        api = MagicMock()
        api.confirm_availability.return_value = {'confirmedCount': 1}
        api.get_availability.side_effect = ApiError('', status_code=None)
        calendar = self.make_calendar(api)
        calendar.toggle_slot(0, 13)

        assert calendar.confirm() is True
        assert calendar.last_confirmed_count == 1
        assert calendar.success_message.startswith('Confirmed 1 time slots')
        assert calendar.error == 'Failed to load availability'
        assert not calendar.confirming
