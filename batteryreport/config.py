import os


class Config:
    """Application configuration from environment variables."""

    # Flask
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    FLASK_ENV = os.environ.get('FLASK_ENV', 'production')
    DEBUG = FLASK_ENV == 'development'
    TESTING = False

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    WIDE_EVENT_SAMPLE_RATE = float(os.environ.get('WIDE_EVENT_SAMPLE_RATE', 0.05))

    # API Configuration
    FLASK_HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    FLASK_PORT = int(os.environ.get('FLASK_PORT', 8080))

    # Uploads
    MAX_UPLOAD_MB = int(os.environ.get('MAX_UPLOAD_MB', 10))
    MAX_CONTENT_LENGTH = MAX_UPLOAD_MB * 1024 * 1024
    ALLOWED_EXTENSIONS = ('.txt', '.log', '.html', '.htm')

    # Rate limiting
    RATELIMIT_ENABLED = os.environ.get('RATELIMIT_ENABLED', 'true').lower() == 'true'
    RATELIMIT_STORAGE_URI = os.environ.get('RATE_LIMIT_STORAGE_URI', 'memory://')

    # Session detection
    FULL_CHARGE_THRESHOLD = float(os.environ.get('FULL_CHARGE_THRESHOLD', 98))


class TestingConfig(Config):
    """Configuration used by the test suite."""

    TESTING = True
    RATELIMIT_ENABLED = False
    WIDE_EVENT_SAMPLE_RATE = 0.0
