from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import MetaData, event
from sqlalchemy.engine import Engine
from sqlite3 import Connection as SQLite3Connection

# Named constraints keep Alembic autogenerate stable across SQLite and PostgreSQL
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

db = SQLAlchemy(metadata=MetaData(naming_convention=NAMING_CONVENTION))

def get_migrate(app):
    # SQLite cannot ALTER constraints in place, so migrations rebuild tables in batch mode
    return Migrate(app, db, render_as_batch=True, compare_type=True)

def create_db():
    db.create_all()

def reset_db():
    db.session.remove()
    db.drop_all()
    db.create_all()

def init_db(app):
    db.init_app(app)

@event.listens_for(Engine, "connect")
def _enable_sqlite_fk(dbapi_connection, connection_record):
    # Availability rows cascade with their track and instructor, which SQLite
    # only honours with foreign keys switched on per connection.
    if isinstance(dbapi_connection, SQLite3Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()
