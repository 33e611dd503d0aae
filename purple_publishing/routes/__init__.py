"""Routes package - register all blueprints."""

from flask import Flask


def register_blueprints(app: Flask):
    """Register all blueprints with the application."""
    from .auth import auth_bp
    from .main import main_bp
    from .cms import cms_bp
    from .content import content_bp
    from .submissions import submissions_bp
    from .uploads import uploads_bp
    from .users import users_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(cms_bp, url_prefix='/api/cms')
    app.register_blueprint(content_bp, url_prefix='/api/content')
    app.register_blueprint(submissions_bp, url_prefix='/api/submissions')
    app.register_blueprint(uploads_bp)
    app.register_blueprint(users_bp, url_prefix='/api/users')
