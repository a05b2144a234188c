import os
from datetime import timedelta

from dotenv import load_dotenv

# Pick up a local .env before any setting is read
load_dotenv()

# Define the base directory for the database file (the project root)
BASEDIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
DB_PATH = os.path.join(BASEDIR, 'rental.db')


class ValidationConfig:
    # Max lengths for free-text fields
    ROOM_NAME_MAX_LENGTH = int(os.environ.get('ROOM_NAME_MAX_LENGTH', 100))
    ADDRESS_MAX_LENGTH = int(os.environ.get('ADDRESS_MAX_LENGTH', 255))
    TENANT_NAME_MAX_LENGTH = int(os.environ.get('TENANT_NAME_MAX_LENGTH', 100))
    # Utility period bounds
    MONTH_MIN = 1
    MONTH_MAX = 12
    YEAR_MIN = int(os.environ.get('UTILITY_YEAR_MIN', 2000))
    YEAR_MAX = int(os.environ.get('UTILITY_YEAR_MAX', 2100))


def _allowed_origins():
    extra = os.environ.get('CORS_ALLOWED_ORIGINS', '')
    origins = [o.strip() for o in extra.split(',') if o.strip()]
    return origins or ['http://localhost:3000', 'http://127.0.0.1:3000']


class Config:
    """Base configuration class."""
    # Defaulting to a file-based SQLite database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + DB_PATH
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'isolation_level': os.environ.get('DB_ISOLATION_LEVEL', 'SERIALIZABLE'),
    }

    # Secret Key is required by Flask
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-very-secret-and-hard-to-guess-string'
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.environ.get('JWT_ACCESS_TOKEN_HOURS', 12)))

    # Single operator account
    AUTH_USERNAME = os.environ.get('AUTH_USERNAME', 'admin')
    AUTH_PASSWORD = os.environ.get('AUTH_PASSWORD', 'admin')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    CORS_ALLOWED_ORIGINS = _allowed_origins()


class TestingConfig(Config):
    """Configuration used specifically for running Pytest."""
    TESTING = True
    # Crucial: Use an in-memory SQLite database for fast, isolated testing
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ECHO = False
    SECRET_KEY = 'testing-secret-key-with-enough-length-for-hs256'
    JWT_SECRET_KEY = SECRET_KEY
    AUTH_USERNAME = 'admin'
    AUTH_PASSWORD = 'admin'
    LOG_LEVEL = 'WARNING'
