"""Role-based access decorators."""

from functools import wraps
from flask_login import current_user
from purple_publishing.errors import AuthError, ForbiddenError
from purple_publishing.models import ROLE_ADMIN


def roles_required(*roles):
    """Decorator to require an authenticated user holding one of ``roles``."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise AuthError('Authentication required.')
            if not current_user.has_role(*roles):
                raise ForbiddenError('Access denied.')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    """Decorator to require admin role."""
    return roles_required(ROLE_ADMIN)(f)
