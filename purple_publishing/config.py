import os
from dotenv import load_dotenv

load_dotenv()


def _bool(value, default=False):
    """Parse environment flags such as "true", "1", "yes"."""
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 't', 'yes', 'y'}


def _split(value):
    return [item.strip() for item in (value or '').split(',') if item.strip()]


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database - SQLite for local development
    basedir = os.path.dirname(os.path.dirname(__file__))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f'sqlite:///{os.path.join(basedir, "instance", "purple_publishing.db")}'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_TABLES = _bool(os.environ.get('AUTO_CREATE_TABLES'), default=True)

    # Bearer tokens
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ISSUER = os.environ.get('JWT_ISSUER', 'purple-publishing-api')
    JWT_AUDIENCE = os.environ.get('JWT_AUDIENCE', 'purple-publishing-admin')
    JWT_EXPIRES_HOURS = int(os.environ.get('JWT_EXPIRES_HOURS', 8))
    PASSWORD_HASH_ITERATIONS = int(os.environ.get('PASSWORD_HASH_ITERATIONS', 100000))

    # Seed admin account
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'admin123')
    SEED_ADMIN_ON_STARTUP = _bool(os.environ.get('SEED_ADMIN_ON_STARTUP'), default=True)

    # Upload Configuration
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or \
        os.path.join(basedir, 'purple_publishing', 'static', 'uploads')
    PRIVATE_UPLOAD_FOLDER = os.environ.get('PRIVATE_UPLOAD_FOLDER') or \
        os.path.join(basedir, 'instance', 'uploads_private')
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024  # 20MB per request, all files together

    # Mail Configuration
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = _bool(os.environ.get('MAIL_USE_TLS'), default=True)
    MAIL_USE_SSL = _bool(os.environ.get('MAIL_USE_SSL'), default=False)
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = (
        os.environ.get('MAIL_FROM_NAME', 'Purple Publishing'),
        os.environ.get('MAIL_FROM_EMAIL') or os.environ.get('MAIL_USERNAME') or 'no-reply@localhost',
    )

    # Internal notification recipients
    NOTIFY_SHARED_INBOX = os.environ.get('NOTIFY_SHARED_INBOX', '')
    NOTIFY_PUBLISHING = os.environ.get('NOTIFY_PUBLISHING', '')
    NOTIFY_SUPPORT = os.environ.get('NOTIFY_SUPPORT', '')
    NOTIFY_INFO = os.environ.get('NOTIFY_INFO', '')
    NOTIFY_LEGAL = os.environ.get('NOTIFY_LEGAL', '')
    REJECTION_SIGNATURE = os.environ.get('REJECTION_SIGNATURE', 'Your Purple Crunch Records Team')

    CORS_ORIGINS = _split(os.environ.get('CORS_ORIGINS')) or ['http://localhost:5173']

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'plain')

    # Pagination
    SUBMISSIONS_PAGE_SIZE = 50
    SUBMISSIONS_MAX_PAGE_SIZE = 200
    EXPORT_MAX_ROWS = 5000


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_ECHO = False


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'json')
    SEED_ADMIN_ON_STARTUP = _bool(os.environ.get('SEED_ADMIN_ON_STARTUP'), default=False)


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SEED_ADMIN_ON_STARTUP = False
    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = ('Purple Publishing', 'no-reply@example.com')
    PASSWORD_HASH_ITERATIONS = 1000
    NOTIFY_SHARED_INBOX = 'inbox@example.com'
    NOTIFY_PUBLISHING = 'publishing@example.com'
    NOTIFY_SUPPORT = 'support@example.com'
    NOTIFY_INFO = 'info@example.com'
    NOTIFY_LEGAL = 'legal@example.com'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
