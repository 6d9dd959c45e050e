"""
Flask application configuration classes.
Provides configuration for development, production, and testing environments.
"""

import os
from datetime import timedelta


class Config:
    """Base configuration class with common settings."""

    # Secret key for session management and CSRF protection
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database configuration (raw SQLite)
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or 'instance/availability.db'
    DATABASE_TIMEOUT = int(os.environ.get('DATABASE_TIMEOUT', 10))  # seconds to wait for the write lock

    # Security settings
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600  # CSRF token expires after 1 hour
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False  # Set to True in production with HTTPS
    PERMANENT_SESSION_LIFETIME = timedelta(
        hours=int(os.environ.get('SESSION_TIMEOUT_HOURS', 8))
    )

    # Locale
    TIMEZONE = os.environ.get('TIMEZONE') or 'Asia/Kolkata'
    CURRENCY = os.environ.get('CURRENCY') or 'INR'

    # Fee schedule
    CLEANING_FEE_PERCENT = float(os.environ.get('CLEANING_FEE_PERCENT', 0.10))
    MIN_CLEANING_FEE = int(os.environ.get('MIN_CLEANING_FEE', 500))
    BASE_OCCUPANCY = int(os.environ.get('BASE_OCCUPANCY', 2))
    EXTRA_GUEST_FEE_PER_NIGHT = int(os.environ.get('EXTRA_GUEST_FEE_PER_NIGHT', 200))
    SERVICE_FEE_PERCENT = float(os.environ.get('SERVICE_FEE_PERCENT', 0.05))

    # Calendar limits
    ANALYTICS_DEFAULT_DAYS = 90
    ANALYTICS_MAX_DAYS = 730
    RECURRING_MAX_WINDOW_DAYS = 730
    EDITOR_HISTORY_LIMIT = 50

    # Payment processor (empty key = emulated checkout)
    PAYMENT_API_URL = os.environ.get('PAYMENT_API_URL', '')
    PAYMENT_API_KEY = os.environ.get('PAYMENT_API_KEY', '')
    PAYMENT_TIMEOUT = int(os.environ.get('PAYMENT_TIMEOUT', 10))
    PAYMENT_WEBHOOK_SECRET = os.environ.get('PAYMENT_WEBHOOK_SECRET', '')
    SITE_URL = os.environ.get('SITE_URL') or 'http://localhost:5000'

    # Application settings
    APP_NAME = 'WanderLust Availability'
    APP_VERSION = '1.0.0'


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    TESTING = False
    SESSION_COOKIE_SECURE = False
    WTF_CSRF_SSL_STRICT = False


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'true').lower() == 'true'
    WTF_CSRF_SSL_STRICT = SESSION_COOKIE_SECURE

    # URL scheme preference (follows SESSION_COOKIE_SECURE setting)
    PREFERRED_URL_SCHEME = 'https' if SESSION_COOKIE_SECURE else 'http'

    @classmethod
    def validate(cls) -> None:
        """Validate that required production environment variables are set."""
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if len(secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters in production")
        if not os.environ.get('DATABASE_PATH'):
            raise ValueError("DATABASE_PATH environment variable must be set in production")
        if os.environ.get('PAYMENT_API_KEY') and not os.environ.get('PAYMENT_API_URL'):
            raise ValueError("PAYMENT_API_URL must be set when PAYMENT_API_KEY is set")


class TestConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    WTF_CSRF_ENABLED = False  # Disable CSRF for tests
    DATABASE_PATH = os.environ.get('TEST_DATABASE_PATH', 'instance/test_availability.db')
    SECRET_KEY = 'test-secret-key'
    PAYMENT_API_URL = ''
    PAYMENT_API_KEY = ''
    PAYMENT_WEBHOOK_SECRET = 'test-webhook-secret'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
    'default': DevelopmentConfig
}
