import json, logging, unittest
from datetime import date
from unittest.mock import patch

from App.main import create_app
from App.database import db, create_db
from App.config import _normalize_db_uri
from App.logging_config import ConsoleFormatter, JsonLogFormatter
from App.models import *
from App.controllers import (
    current_week_start,
    get_schedule_settings,
    get_week_reset_day,
    initialize,
    login,
    update_schedule_settings,
)
from App.utils.time_utils import parse_week_start


LOGGER = logging.getLogger(__name__)

'''
    Unit Tests
'''
class ConfigUnitTests(unittest.TestCase):

    def test_postgres_scheme_is_normalized(self):
        self.assertEqual(_normalize_db_uri('postgres://u:p@host/db'), 'postgresql://u:p@host/db')
        self.assertEqual(_normalize_db_uri('sqlite:///x.db'), 'sqlite:///x.db')
        self.assertIsNone(_normalize_db_uri(None))

    def test_overrides_win_and_sqlite_skips_pool_options(self):
        app = create_app({'TESTING': True, 'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
                          'JWT_SECRET_KEY': 'jwt-test-secret', 'AUTO_CREATE_TABLES': False})
        self.assertTrue(app.config['TESTING'])
        self.assertEqual(app.config['JWT_SECRET_KEY'], 'jwt-test-secret')
        self.assertNotIn('pool_pre_ping', app.config['SQLALCHEMY_ENGINE_OPTIONS'])
        self.assertIn('api', app.blueprints)

    def test_parse_week_start(self):
        self.assertEqual(parse_week_start('2025-01-05'), date(2025, 1, 5))
        self.assertEqual(parse_week_start(date(2025, 1, 5)), date(2025, 1, 5))
        for raw in ('2025-13-01', '', None, 20250105):
            with self.assertRaises(ValueError):
                parse_week_start(raw)


class LoggingUnitTests(unittest.TestCase):

    def _record(self, **extra):
        record = logging.LogRecord('App.test', logging.INFO, __file__, 1, 'Availability saved', (), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter_includes_structured_fields(self):
        line = JsonLogFormatter('svc').format(self._record(event='availability_saved', slots_created=2))
        payload = json.loads(line)
        self.assertEqual(payload['msg'], 'Availability saved')
        self.assertEqual(payload['service'], 'svc')
        self.assertEqual(payload['event'], 'availability_saved')
        self.assertEqual(payload['slots_created'], 2)
        self.assertNotIn('args', payload)

    def test_console_formatter(self):
        line = ConsoleFormatter().format(self._record(event='x'))
        self.assertIn('INFO', line)
        self.assertIn('[App.test] Availability saved', line)
        self.assertIn('"event": "x"', line)
        self.assertEqual(ConsoleFormatter().format(self._record()).count('{'), 0)


'''
    Integration Tests
'''
class ScheduleSettingsIntegrationTests(unittest.TestCase):

    def setUp(self):
        self.app = create_app({'TESTING': True, 'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
                               'JWT_SECRET_KEY': 'jwt-test-secret'})
        self.app_context = self.app.app_context()
        self.app_context.push()
        create_db()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def test_defaults_created_once(self):
        first = get_schedule_settings()
        second = get_schedule_settings()
        self.assertEqual(first.id, second.id)
        self.assertEqual(ScheduleSettings.query.count(), 1)
        self.assertEqual(get_week_reset_day(), 0)

    def test_update(self):
        settings = update_schedule_settings({'weekResetDay': 6, 'weekResetHour': 20, 'nextOpenDate': '2025-02-01T10:00:00'})
        self.assertEqual(settings.week_reset_day, 6)
        self.assertEqual(settings.week_reset_hour, 20)
        self.assertEqual(settings.next_open_date.day, 1)
        self.assertEqual(current_week_start(date(2025, 1, 8)), date(2025, 1, 4))

    def test_invalid_update_writes_nothing(self):
        update_schedule_settings({'weekResetDay': 2})
        for changes in ({'weekResetDay': 7}, {'weekResetHour': -1}, {'availabilityOpenHours': 0},
                        {'weekResetDay': True}, {'nextOpenDate': 'soon'}):
            with self.assertRaises(ValueError):
                update_schedule_settings(changes)
        db.session.expire_all()
        self.assertEqual(get_week_reset_day(), 2)

    def test_current_week_start_defaults_to_today(self):
        with patch('App.controllers.schedule_settings.utc_now') as now:
            now.return_value.date.return_value = date(2025, 1, 11)
            self.assertEqual(current_week_start(), date(2025, 1, 5))


class InitializeIntegrationTests(unittest.TestCase):

    def setUp(self):
        self.app = create_app({'TESTING': True, 'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
                               'JWT_SECRET_KEY': 'jwt-test-secret'})
        self.app_context = self.app.app_context()
        self.app_context.push()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def test_initialize_seeds_sample_data(self):
        initialize()

        self.assertEqual(User.query.count(), 6)
        self.assertEqual(Track.query.count(), 3)
        self.assertEqual(ScheduleSettings.query.count(), 1)
        instructor = User.query.filter_by(email='instructor@andrino-academy.com').first()
        self.assertEqual(len(instructor.instructed_tracks), 2)
        token, user = login('instructor@andrino-academy.com', '123456')
        self.assertIsNotNone(token)
