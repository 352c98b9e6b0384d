import click, pytest, sys
from flask.cli import AppGroup

from App.database import get_migrate
from App.main import create_app
from App.models import ROLES
from App.exceptions import AvailabilityError
from App.controllers import (create_user, get_all_users, get_all_users_json, get_user_by_email, initialize,
    create_track, get_availability, confirm_availability, current_week_start,
    get_schedule_settings, update_schedule_settings)
from App.utils.time_utils import format_date

app = create_app()
migrate = get_migrate(app)

@app.cli.command("init", help="Creates and initializes the database")
def init():
    initialize()
    print('database intialized')

# User Commands
user_cli = AppGroup('user', help='User object commands')

@user_cli.command("create", help="Creates a user")
@click.argument("email")
@click.argument("password")
@click.argument("name")
@click.option("--role", type=click.Choice(ROLES), default="instructor", show_default=True)
def create_user_command(email, password, name, role):
    try:
        user = create_user(email, password, name, role=role)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    print(f'{user.email} created with id {user.id}')

@user_cli.command("list", help="Lists users in the database")
@click.argument("format", default="string")
@click.option("--role", type=click.Choice(ROLES), default=None)
def list_user_command(format, role):
    if format == 'string':
        print(get_all_users(role))
    else:
        print(get_all_users_json(role))

app.cli.add_command(user_cli)

# Track Commands
track_cli = AppGroup('track', help='Track commands')

@track_cli.command("create", help="Creates a track taught by an instructor")
@click.argument("name")
@click.argument("instructor_email")
@click.option("--grade-id", default="grade-1", show_default=True)
@click.option("--description", default=None)
def create_track_command(name, instructor_email, grade_id, description):
    instructor = get_user_by_email(instructor_email)
    if not instructor:
        raise click.BadParameter(f'no user with email {instructor_email}', param_hint='instructor_email')
    try:
        track = create_track(name, grade_id, instructor.id, description=description)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint='instructor_email') from exc
    print(f'Track {track.name} created with id {track.id}')

app.cli.add_command(track_cli)

# Availability Commands
availability_cli = AppGroup('availability', help='Instructor availability commands')


def _instructor_or_fail(email):
    instructor = get_user_by_email(email)
    if not instructor or not instructor.is_instructor():
        raise click.BadParameter(f'{email} is not an instructor', param_hint='instructor_email')
    return instructor


@availability_cli.command("list", help="Lists an instructor's slots for a week")
@click.argument("instructor_email")
@click.option("--track-id", default=None)
@click.option("--week", "week_start_date", default=None, help="Week start (YYYY-MM-DD), defaults to the current week")
def list_availability_command(instructor_email, track_id, week_start_date):
    instructor = _instructor_or_fail(instructor_email)
    week_start_date = week_start_date or format_date(current_week_start())
    try:
        rows, version = get_availability(instructor.id, track_id=track_id, week_start_date=week_start_date)
    except AvailabilityError as exc:
        raise click.ClickException(exc.message) from exc

    click.echo(f'Week {week_start_date} ({len(rows)} slots, version {version[:12]})')
    for row in rows:
        flags = ''.join(flag for flag, on in (('C', row.is_confirmed), ('B', row.is_booked)) if on) or '-'
        click.echo(f'  {row.track_id}  day {row.day_of_week}  {row.start_hour:02d}:00-{row.end_hour:02d}:00  {flags}')


@availability_cli.command("confirm", help="Confirms an instructor's saved slots for a track and week")
@click.argument("instructor_email")
@click.argument("track_id")
@click.option("--week", "week_start_date", default=None, help="Week start (YYYY-MM-DD), defaults to the current week")
def confirm_availability_command(instructor_email, track_id, week_start_date):
    instructor = _instructor_or_fail(instructor_email)
    week_start_date = week_start_date or format_date(current_week_start())
    try:
        count = confirm_availability(instructor.id, track_id, week_start_date)
    except AvailabilityError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f'Confirmed {count} availability slots for the week of {week_start_date}')

app.cli.add_command(availability_cli)

# Settings Commands
settings_cli = AppGroup('settings', help='Schedule settings commands')

@settings_cli.command("show", help="Shows the schedule settings")
def show_settings_command():
    settings = get_schedule_settings()
    for key, value in settings.to_dict().items():
        click.echo(f'{key}: {value}')
    click.echo(f'Current week starts {format_date(current_week_start())} ({settings.week_reset_day_name})')


@settings_cli.command("set", help="Updates the schedule settings")
@click.option("--week-reset-day", type=click.IntRange(0, 6), default=None, help="0=Sunday ... 6=Saturday")
@click.option("--week-reset-hour", type=click.IntRange(0, 23), default=None)
@click.option("--availability-open-hours", type=click.IntRange(min=1), default=None)
def set_settings_command(week_reset_day, week_reset_hour, availability_open_hours):
    changes = {
        'weekResetDay': week_reset_day,
        'weekResetHour': week_reset_hour,
        'availabilityOpenHours': availability_open_hours,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        raise click.UsageError('Nothing to update')
    try:
        settings = update_schedule_settings(changes)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f'Settings updated, weeks now start on {settings.week_reset_day_name}')

app.cli.add_command(settings_cli)

# Test Commands

test_cli = AppGroup('test', help='Testing commands')

@test_cli.command('app', help='Run tests (all/unit/int)')
@click.argument('type', default='all')
def run_tests(type):
    if type == 'unit':
        sys.exit(pytest.main(['-k', 'UnitTests']))
    elif type == 'int':
        sys.exit(pytest.main(['-k', 'IntegrationTests']))
    else:
        sys.exit(pytest.main([]))

app.cli.add_command(test_cli)
