import uuid
from time import perf_counter
from datetime import datetime, timezone

from flask import Flask, jsonify, request, g
from flask_cors import CORS
from dotenv import load_dotenv
from sqlalchemy import inspect, text

from App.database import init_db, db, get_migrate
from App.config import load_config
from App.controllers.auth import setup_jwt
from App.views import views
from App.logging_config import configure_logging


def add_views(app):
    for view in views:
        app.register_blueprint(view)


def _register_request_logging(app):
    @app.before_request
    def _structured_request_logging() -> None:
        g.request_timer = perf_counter()
        g.request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        app.logger.info(
            'Incoming request',
            extra={
                'event': 'request_started',
                'request_id': g.request_id,
                'method': request.method,
                'path': request.path,
                'remote_addr': request.remote_addr,
            },
        )

    @app.after_request
    def _structured_response_logging(response):
        duration_ms = None
        if hasattr(g, 'request_timer'):
            duration_ms = round((perf_counter() - g.request_timer) * 1000, 2)
        request_id = getattr(g, 'request_id', None)
        if request_id:
            response.headers['X-Request-ID'] = request_id
        app.logger.info(
            'Completed request',
            extra={
                'event': 'request_completed',
                'request_id': request_id,
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': duration_ms,
            },
        )
        return response

    @app.teardown_request
    def _structured_request_teardown(exc):
        if exc is not None:
            app.logger.error(
                'Unhandled request exception',
                exc_info=exc,
                extra={
                    'event': 'request_exception',
                    'request_id': getattr(g, 'request_id', None),
                    'method': getattr(request, 'method', None),
                    'path': getattr(request, 'path', None),
                },
            )


def _register_jwt_responses(app, jwt):
    @jwt.invalid_token_loader
    @jwt.unauthorized_loader
    def custom_unauthorized_response(error):
        app.logger.warning(
            'Unauthorized access attempt',
            extra={
                'event': 'security_auth_failure',
                'reason': error,
                'path': request.path,
                'request_id': getattr(g, 'request_id', None),
            },
        )
        return jsonify(error="Unauthorized"), 401

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_data):
        app.logger.info(
            'JWT token expired',
            extra={
                'event': 'security_token_expired',
                'identity': jwt_data.get('sub') if isinstance(jwt_data, dict) else None,
                'path': request.path,
            },
        )
        return jsonify(error="Unauthorized", errors={"auth": "Token has expired"}), 401

    @jwt.user_lookup_error_loader
    def missing_user_callback(jwt_header, jwt_data):
        return jsonify(error="Unauthorized"), 401


def _sync_schema(app):
    """Create missing tables; migrations handle everything else."""
    with app.app_context():
        existing_tables = set(inspect(db.engine).get_table_names())
        missing = [name for name in db.metadata.tables if name not in existing_tables]
        if missing:
            db.create_all()
        app.logger.info(
            'Database schema checked',
            extra={'event': 'db_schema_sync', 'tables': missing, 'mode': 'initial' if missing else 'noop'},
        )


def create_app(overrides={}):
    # Load environment variables from .env if present
    load_dotenv()
    app = Flask(__name__)
    load_config(app, overrides)

    configure_logging(app)
    app.logger.info(
        'Flask application configured',
        extra={
            'event': 'app_boot',
            'environment': app.config.get('ENV'),
            'debug': app.debug,
            'service': app.config.get('SERVICE_NAME'),
        },
    )

    _register_request_logging(app)

    # The Next.js front end calls the API from its own origin
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config.get('CORS_ORIGINS', []),
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "X-Request-ID"],
            "supports_credentials": True
        }
    })

    add_views(app)
    init_db(app)
    get_migrate(app)
    jwt = setup_jwt(app)
    _register_jwt_responses(app, jwt)

    if app.config.get('AUTO_CREATE_TABLES'):
        _sync_schema(app)

    @app.get("/healthcheck")
    def healthcheck():
        checks = {'app': {'ok': True, 'time': datetime.now(timezone.utc).isoformat()}}
        overall_ok = True

        missing = [key for key in ('SECRET_KEY', 'JWT_SECRET_KEY') if not app.config.get(key)]
        checks['config'] = {'ok': not missing, 'missing': missing}
        overall_ok = overall_ok and not missing

        try:
            db.session.execute(text("SELECT 1"))
            checks['db'] = {'ok': True}
        except Exception as e:
            checks['db'] = {'ok': False, 'error': str(e)}
            overall_ok = False

        status_code = 200 if overall_ok else 503
        app.logger.info(
            'Healthcheck completed',
            extra={
                'event': 'healthcheck_completed',
                'overall_ok': overall_ok,
                'request_id': getattr(g, 'request_id', None),
            },
        )
        return jsonify(status='ok' if overall_ok else 'fail', checks=checks), status_code

    return app
