"""Staff account model."""

import uuid
from flask_login import UserMixin
from sqlalchemy import func
from purple_publishing.extensions import db
from purple_publishing.utils.dates import utcnow, isoformat
from purple_publishing.utils.security import hash_password, verify_password

ROLE_ADMIN = 'Admin'
ROLE_EDITOR = 'Editor'
ROLE_INBOX = 'Inbox'
ROLES = (ROLE_ADMIN, ROLE_EDITOR, ROLE_INBOX)


class User(UserMixin, db.Model):
    """Admin, editor and inbox accounts."""
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(512), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_INBOX)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    def set_password(self, password):
        """Hash and set the password."""
        self.password_hash = hash_password(password)

    def check_password(self, password):
        """Check if password matches."""
        return verify_password(password, self.password_hash)

    def is_admin(self):
        return self.role == ROLE_ADMIN

    def has_role(self, *roles):
        return self.role in roles

    def is_active_admin(self):
        return self.is_admin() and self.is_active

    @staticmethod
    def find_by_email(email):
        """Case-insensitive email lookup."""
        return User.query.filter(func.lower(User.email) == email.strip().lower()).first()

    @staticmethod
    def email_taken(email, exclude_id=None):
        query = User.query.filter(func.lower(User.email) == email.strip().lower())
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return db.session.query(query.exists()).scalar()

    @staticmethod
    def exists_other_active_admin(exclude_id):
        """Check whether an active Admin other than ``exclude_id`` exists."""
        query = User.query.filter(
            User.id != exclude_id,
            User.role == ROLE_ADMIN,
            User.is_active.is_(True)
        )
        return db.session.query(query.exists()).scalar()

    def is_last_active_admin(self):
        """True when removing this account's admin rights would leave none."""
        return self.is_active_admin() and not User.exists_other_active_admin(self.id)

    @staticmethod
    def ensure_seed_admin(email, password):
        """Create the seed Admin if missing, re-enable it if disabled."""
        admin = User.find_by_email(email)
        if admin is None:
            admin = User(email=email.strip(), role=ROLE_ADMIN, is_active=True)
            admin.set_password(password)
            db.session.add(admin)
            db.session.commit()
            return admin, True
        if not admin.is_active:
            admin.is_active = True
            db.session.commit()
        return admin, False

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'role': self.role,
            'isActive': self.is_active,
            'createdAt': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<User {self.email}>'
