from flask_jwt_extended import create_access_token, JWTManager
from App.models import User
from App.database import db


def login(email, password):
    user = User.query.filter_by(email=email).first()
    if user and user.check_password(password):
        access_token = create_access_token(
            identity=user.id,
            additional_claims={'role': user.role}
        )
        return access_token, user
    return None, None


def issue_token(user):
    """Token for an already-authenticated user (CLI and tests)."""
    return create_access_token(identity=user.id, additional_claims={'role': user.role})


def setup_jwt(app):
    jwt = JWTManager(app)

    @jwt.user_identity_loader
    def user_identity_lookup(identity):
        return str(identity)

    @jwt.user_lookup_loader
    def user_lookup_callback(_jwt_header, jwt_data):
        return db.session.get(User, jwt_data["sub"])

    return jwt
