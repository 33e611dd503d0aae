"""Flask application factory."""

import os
from flask import Flask
from .config import config
from .extensions import db, migrate, login_manager, mail, cors
from . import errors
from .utils.logging import configure_logging


def create_app(config_name=None, overrides=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.environ.get('FLASK_CONFIG', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    if overrides:
        app.config.update(overrides)

    app.json.sort_keys = False
    configure_logging(app)
    errors.init_app(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    mail.init_app(app)
    cors.init_app(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}},
                  expose_headers=['Content-Disposition'])

    # Create instance and upload directories
    for dir_path in (app.instance_path, app.config['UPLOAD_FOLDER'],
                     app.config['PRIVATE_UPLOAD_FOLDER']):
        os.makedirs(dir_path, exist_ok=True)

    # Register blueprints
    from .routes import register_blueprints
    register_blueprints(app)

    # Bearer token loader for Flask-Login
    from .models import User
    from .utils.security import bearer_token, decode_token

    @login_manager.request_loader
    def load_user_from_request(req):
        token = bearer_token(req.headers.get('Authorization'))
        if token is None:
            return None
        claims = decode_token(token)
        if claims is None:
            return None
        user = db.session.get(User, str(claims['sub']))
        if user is None or not user.is_active:
            return None
        return user

    @login_manager.unauthorized_handler
    def unauthorized():
        return errors.AuthError('Authentication required.').to_response()

    with app.app_context():
        if app.config['AUTO_CREATE_TABLES']:
            db.create_all()
        if app.config['SEED_ADMIN_ON_STARTUP']:
            _seed_admin(app)

    @app.after_request
    def log_request(response):
        app.logger.debug('Response %s', response.status_code,
                         extra={'component': 'http'})
        return response

    return app


def _seed_admin(app):
    from .models import User
    admin, created = User.ensure_seed_admin(app.config['ADMIN_USERNAME'],
                                            app.config['ADMIN_PASSWORD'])
    if created:
        app.logger.info('Seeded admin account %s', admin.email,
                        extra={'component': 'bootstrap'})
