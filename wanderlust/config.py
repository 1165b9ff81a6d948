import os
from dotenv import load_dotenv
from datetime import timedelta

IS_PRODUCTION = os.getenv("NODE_ENV") == "production"

# Load environment variables from .env file outside production
if not IS_PRODUCTION:
    load_dotenv()

DEFAULT_SECRET = "thisshouldbesecret!"


class Config:
    """Application configuration settings."""

    ENV_NAME = os.getenv("NODE_ENV", "development")
    PORT = int(os.getenv("PORT", 8080))

    # Signs the session cookie and encrypts session records at rest
    SECRET_KEY = os.getenv("SECRET", DEFAULT_SECRET)

    # Database configuration. A missing URL is reported by the persistence
    # client at start-up instead of failing the import.
    SQLALCHEMY_DATABASE_URI = os.getenv("ATLASDB_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    DB_CONNECT_ATTEMPTS = int(os.getenv("DB_CONNECT_ATTEMPTS", 1))

    LOG_DIR = os.getenv("LOG_DIR", "logs")

    # Rate Limiter Storage URI
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "10 per minute")

    # Server-side sessions
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_TOUCH_AFTER = timedelta(hours=24)
    SESSION_SAVE_UNINITIALIZED = True
    SESSION_COOKIE_NAME = "session"
    SESSION_COOKIE_SECURE = IS_PRODUCTION
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    DEFAULT_LISTING_IMAGE = os.getenv(
        "DEFAULT_LISTING_IMAGE",
        "https://images.unsplash.com/photo-1625505826533-5c80aca7d157?auto=format&fit=crop&w=800&q=60",
    )


class TestConfig(Config):
    """Settings used by the test suite."""

    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    DB_CONNECT_ATTEMPTS = 1
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    SESSION_COOKIE_SECURE = False
