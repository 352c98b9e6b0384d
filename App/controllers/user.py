from App.models import User, ROLES
from App.database import db
import logging

logger = logging.getLogger(__name__)


def create_user(email, password, name, role='student'):
    if role not in ROLES:
        raise ValueError(f"role must be one of {', '.join(ROLES)}")
    user = User(email=email, password=password, name=name, role=role)
    db.session.add(user)
    db.session.commit()
    logger.info(f"Created {role} user {email}")
    return user


def create_instructor(email, password, name):
    return create_user(email, password, name, role='instructor')


def get_user(user_id):
    return db.session.get(User, user_id)


def get_user_by_email(email):
    return User.query.filter_by(email=email).first()


def get_all_users(role=None):
    query = User.query
    if role:
        query = query.filter_by(role=role)
    return query.order_by(User.created_at).all()


def get_all_users_json(role=None):
    return [user.to_dict() for user in get_all_users(role)]
