import uuid
from werkzeug.security import check_password_hash, generate_password_hash
from App.database import db
from App.utils.time_utils import utc_now

ROLES = ('ceo', 'manager', 'coordinator', 'instructor', 'student')


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    name = db.Column(db.String(255), nullable=False)
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='student', index=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    __table_args__ = (
        db.CheckConstraint(
            "role IN ('ceo', 'manager', 'coordinator', 'instructor', 'student')",
            name='check_valid_user_role',
        ),
    )

    def __init__(self, email, password, name, role='student', id=None):
        if id is not None:
            self.id = id
        self.email = email
        self.name = name
        self.role = role
        self.set_password(password)

    def to_dict(self):
        """Public representation (excludes password)"""
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
        }

    def set_password(self, password):
        self.password = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password, password)

    def is_instructor(self):
        return self.role == 'instructor'

    def is_student(self):
        return self.role == 'student'

    def can_manage_schedule(self):
        return self.role in ('manager', 'ceo')

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'
