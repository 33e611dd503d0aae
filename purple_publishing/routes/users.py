"""Staff account management (Admin only)."""

from flask import Blueprint, current_app, jsonify
from flask_login import current_user
from purple_publishing.errors import ConflictError, NotFoundError, ValidationError
from purple_publishing.extensions import db
from purple_publishing.models import User, ROLES, ROLE_ADMIN
from purple_publishing.utils.decorators import admin_required
from purple_publishing.utils.http import json_body, parse_bool, text

users_bp = Blueprint('users', __name__)

LAST_ADMIN_MESSAGE = 'Cannot remove or disable the last active Admin account.'


def _get_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError('User not found.')
    return user


def _is_self(user):
    return user.id == current_user.id


def _validate_role(role):
    if role not in ROLES:
        raise ValidationError('Role must be Admin, Editor, or Inbox.')
    return role


def _guard_role_change(user, role):
    if role == user.role:
        return
    if _is_self(user):
        raise ValidationError('You cannot change your own role.')
    if user.role == ROLE_ADMIN and user.is_last_active_admin():
        raise ValidationError(LAST_ADMIN_MESSAGE)


def _guard_active_change(user, is_active):
    if is_active or not user.is_active:
        return
    if _is_self(user):
        raise ValidationError('You cannot disable your own account.')
    if user.is_last_active_admin():
        raise ValidationError(LAST_ADMIN_MESSAGE)


def _log(action, user_id):
    current_app.logger.info(action, extra={
        'component': 'users',
        'context': {'user_id': user_id, 'actor_id': current_user.id}
    })


@users_bp.route('')
@admin_required
def list_users():
    users = User.query.order_by(User.created_at.desc()).all()
    return jsonify([u.to_dict() for u in users])


@users_bp.route('', methods=['POST'])
@admin_required
def create_user():
    """Create a staff account."""
    data = json_body()
    email = text(data.get('email'))
    password = data.get('password') if isinstance(data.get('password'), str) else ''
    role = text(data.get('role'))
    if not email or not password.strip() or not role:
        raise ValidationError('Email, password and role are required.')
    _validate_role(role)
    is_active = parse_bool(data.get('isActive'), 'isActive')

    if User.email_taken(email):
        raise ConflictError('User already exists.')

    user = User(email=email, role=role, is_active=True if is_active is None else is_active)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    _log('User created', user.id)
    return jsonify(user.to_dict())


@users_bp.route('/<user_id>', methods=['PUT'])
@admin_required
def update_user(user_id):
    """General update. Every guard runs before anything is applied."""
    user = _get_user(user_id)
    data = json_body()

    email = text(data.get('email'))
    if 'email' in data and not email:
        raise ValidationError('Email cannot be empty.')
    if email and User.email_taken(email, exclude_id=user.id):
        raise ConflictError('Email already in use.')

    role = text(data.get('role'))
    if role:
        _guard_role_change(user, _validate_role(role))

    is_active = parse_bool(data.get('isActive'), 'isActive')
    if is_active is not None:
        _guard_active_change(user, is_active)

    password = data.get('password')
    if email:
        user.email = email
    if role:
        user.role = role
    if is_active is not None:
        user.is_active = is_active
    if isinstance(password, str) and password.strip():
        user.set_password(password)

    db.session.commit()
    _log('User updated', user.id)
    return jsonify(user.to_dict())


@users_bp.route('/<user_id>/role', methods=['PUT'])
@admin_required
def change_role(user_id):
    user = _get_user(user_id)
    role = _validate_role(text(json_body().get('role')))
    _guard_role_change(user, role)

    user.role = role
    db.session.commit()
    _log('User role changed', user.id)
    return jsonify(user.to_dict())


@users_bp.route('/<user_id>/active', methods=['PUT'])
@admin_required
def change_active(user_id):
    user = _get_user(user_id)
    is_active = parse_bool(json_body().get('isActive'), 'isActive')
    if is_active is None:
        raise ValidationError('isActive is required.')
    _guard_active_change(user, is_active)

    user.is_active = is_active
    db.session.commit()
    _log('User active flag changed', user.id)
    return jsonify(user.to_dict())


@users_bp.route('/<user_id>', methods=['DELETE'])
@admin_required
def delete_user(user_id):
    user = _get_user(user_id)
    if _is_self(user):
        raise ValidationError('Cannot delete the currently logged-in user.')
    if user.is_last_active_admin():
        raise ValidationError(LAST_ADMIN_MESSAGE)

    db.session.delete(user)
    db.session.commit()
    _log('User deleted', user_id)
    return '', 204
