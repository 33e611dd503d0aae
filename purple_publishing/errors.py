"""Typed API errors and the JSON error handlers."""

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db


class AppError(Exception):
    """Base exception rendered as ``{"error": {"code", "message"}}``."""
    code = 'APP_ERROR'
    http_status = 500

    def __init__(self, message, code=None, http_status=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status

    def to_response(self):
        response = jsonify({'error': {'code': self.code, 'message': self.message}})
        response.status_code = self.http_status
        return response


class ValidationError(AppError):
    code = 'VALIDATION'
    http_status = 400


class AuthError(AppError):
    code = 'UNAUTHORIZED'
    http_status = 401


class ForbiddenError(AppError):
    code = 'FORBIDDEN'
    http_status = 403


class NotFoundError(AppError):
    code = 'NOT_FOUND'
    http_status = 404


class ConflictError(AppError):
    code = 'CONFLICT'
    http_status = 409


class ContentError(AppError):
    """Stored data could not be served as-is."""
    code = 'CONTENT'
    http_status = 500


class DeliveryError(AppError):
    """An email that is the primary effect of a request was not sent."""
    code = 'DELIVERY'
    http_status = 502


def init_app(app):
    """Attach the JSON error handlers to the application."""
    app.register_error_handler(AppError, _handle_app_error)
    app.register_error_handler(HTTPException, _handle_http_exception)
    app.register_error_handler(Exception, _handle_unexpected)


def _handle_app_error(error):
    return error.to_response()


def _handle_http_exception(error):
    code = (error.name or 'HTTP error').upper().replace(' ', '_')
    return AppError(error.description or error.name, code=code,
                    http_status=error.code or 500).to_response()


def _handle_unexpected(error):
    db.session.rollback()
    current_app.logger.exception('Unhandled exception', exc_info=error,
                                 extra={'component': 'errors'})
    return AppError('An unexpected error occurred.', code='INTERNAL').to_response()
