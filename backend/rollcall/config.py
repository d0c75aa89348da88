"""Configuration module for the Rollcall attendance service."""
import os
from datetime import timedelta


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).lower() in ['true', 'on', '1', 'yes']


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_ALGORITHM = 'HS256'
    STUDENT_SESSION_EXPIRES = timedelta(hours=12)

    # CORS - student pages are served from a separate static site
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'http://localhost:*,http://127.0.0.1:*').split(',')

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day, 50 per hour"

    # Public links embedded in QR codes
    APP_URL = os.environ.get('APP_URL') or 'http://localhost:8000'

    # Identity provider (Google Sign-In ID tokens)
    GOOGLE_CLIENT_ID = os.environ.get('GOOGLE_CLIENT_ID')
    IDENTITY_JWKS_URL = os.environ.get('IDENTITY_JWKS_URL') or \
        'https://www.googleapis.com/oauth2/v3/certs'
    IDENTITY_ISSUERS = ['accounts.google.com', 'https://accounts.google.com']
    IDENTITY_HTTP_TIMEOUT = int(os.environ.get('IDENTITY_HTTP_TIMEOUT') or 5)  # seconds
    IDENTITY_REQUIRE_VERIFIED_EMAIL = _env_flag('IDENTITY_REQUIRE_VERIFIED_EMAIL', 'true')

    # Attendance
    ATTENDANCE_TIMEZONE = os.environ.get('ATTENDANCE_TIMEZONE') or 'UTC'
    BATCH_NAME_PREFIX = 'BATCH_'

    # Pagination
    DEFAULT_HISTORY_LIMIT = 10
    MAX_PAGE_SIZE = 100

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    LOG_FILE = os.environ.get('LOG_FILE') or 'logs/app.log'


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        'sqlite:///rollcall_dev.db'
    SQLALCHEMY_ECHO = _env_flag('SQLALCHEMY_ECHO')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    # Redis (required in production for shared rate limits)
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'

    # Enhanced security
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Stricter limits
    RATELIMIT_DEFAULT = "100 per day, 20 per hour"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    STUDENT_SESSION_EXPIRES = timedelta(minutes=5)
    RATELIMIT_ENABLED = False
    APP_URL = 'https://attendance.test'
    GOOGLE_CLIENT_ID = 'test-client-id.apps.googleusercontent.com'
    ATTENDANCE_TIMEZONE = 'UTC'
    LOG_LEVEL = 'WARNING'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(config_name=None):
    """Get configuration by name."""
    return config.get(config_name or os.environ.get('FLASK_ENV', 'default'), config['default'])
