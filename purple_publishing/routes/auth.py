"""Authentication routes."""

from flask import Blueprint, current_app, jsonify
from flask_login import login_required, current_user
from purple_publishing.errors import AuthError
from purple_publishing.models import User
from purple_publishing.utils.http import json_body, text
from purple_publishing.utils.security import issue_token

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Exchange credentials for a bearer token."""
    data = json_body()
    username = text(data.get('username'))
    password = data.get('password')
    password = password if isinstance(password, str) else ''

    user = User.find_by_email(username) if username and password else None
    if user is None or not user.is_active or not user.check_password(password):
        current_app.logger.info('Failed login', extra={'component': 'auth',
                                                       'context': {'username': username}})
        raise AuthError('Invalid username or password.')

    current_app.logger.info('Login', extra={'component': 'auth',
                                            'context': {'user_id': user.id}})
    return jsonify({
        'token': issue_token(user),
        'role': user.role,
        'email': user.email
    })


@auth_bp.route('/me')
@login_required
def me():
    """Identity behind the presented token."""
    return jsonify({
        'id': current_user.id,
        'email': current_user.email,
        'role': current_user.role
    })
