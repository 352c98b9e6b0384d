import os
import logging
from datetime import timedelta

POSTGRES_SCHEME = 'postgres://'
POSTGRESQL_SCHEME = 'postgresql://'

logger = logging.getLogger(__name__)


def _normalize_db_uri(db_url):
    if db_url and db_url.startswith(POSTGRES_SCHEME):
        return db_url.replace(POSTGRES_SCHEME, POSTGRESQL_SCHEME, 1)
    return db_url


def load_config(app, overrides):
    if os.path.exists(os.path.join(os.path.dirname(__file__), 'custom_config.py')):
        app.config.from_object('App.custom_config')
    else:
        app.config.from_object('App.default_config')

    app.config.from_prefixed_env()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['PREFERRED_URL_SCHEME'] = 'https'

    db_url = (
        os.environ.get('DATABASE_URI_POSTGRES') or
        os.environ.get('DATABASE_URI_SQLITE') or
        os.environ.get('DATABASE_URL') or
        app.config.get('SQLALCHEMY_DATABASE_URI')
    )
    if db_url:
        app.config['SQLALCHEMY_DATABASE_URI'] = _normalize_db_uri(db_url)
    else:
        logger.warning("No database URI configured")

    # JWT Configuration
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(hours=8)
    app.config['JWT_ACCESS_COOKIE_NAME'] = 'access_token'
    app.config["JWT_TOKEN_LOCATION"] = ["headers", "cookies"]

    is_production = os.environ.get('ENV', 'development') == 'production'
    app.config["JWT_COOKIE_SECURE"] = is_production
    app.config["JWT_COOKIE_CSRF_PROTECT"] = is_production
    app.config.setdefault('JWT_SECRET_KEY', app.config['SECRET_KEY'])

    # Comma separated list, e.g. "https://academy.example.com,http://localhost:3000"
    cors_origins = os.environ.get('CORS_ORIGINS')
    if cors_origins:
        app.config['CORS_ORIGINS'] = [origin.strip() for origin in cors_origins.split(',') if origin.strip()]

    # Production schemas are owned by `flask db upgrade`
    app.config.setdefault('AUTO_CREATE_TABLES', not is_production)

    for key in overrides:
        app.config[key] = overrides[key]

    # Overrides may have replaced the URI with a postgres:// one
    final_db_uri = _normalize_db_uri(app.config.get('SQLALCHEMY_DATABASE_URI') or '')
    app.config['SQLALCHEMY_DATABASE_URI'] = final_db_uri

    engine_options = app.config.setdefault('SQLALCHEMY_ENGINE_OPTIONS', {})
    if final_db_uri.startswith('sqlite'):
        for key in ('pool_pre_ping', 'pool_recycle', 'pool_timeout'):
            engine_options.pop(key, None)
    else:
        engine_options.setdefault('pool_pre_ping', True)
        engine_options.setdefault('pool_recycle', 280)
        engine_options.setdefault('pool_timeout', 30)
