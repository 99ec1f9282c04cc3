"""Base configuration shared by every environment."""
import os
from datetime import timedelta


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'

    # CORS (mobile clients send no Origin; the web dashboard does)
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'
    RATELIMIT_ENABLED = True
    RATELIMIT_DEFAULT = "1000 per 15 minutes"
    AUTH_RATE_LIMIT = "10 per 15 minutes"
    SYNC_RATE_LIMIT = "20 per 5 minutes"
    MANAGEMENT_RATE_LIMIT = "100 per 10 minutes"

    # Attendance sync
    SYNC_MAX_BATCH_SIZE = int(os.environ.get('SYNC_MAX_BATCH_SIZE', 100))
    SYNC_RETENTION_DAYS = int(os.environ.get('SYNC_RETENTION_DAYS', 30))
    SYNC_RECORD_TIMEOUT_SECONDS = float(os.environ.get('SYNC_RECORD_TIMEOUT_SECONDS', 5))

    # File Upload
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB
    ALLOWED_EXTENSIONS = {'csv', 'xlsx', 'xls'}

    # Pagination
    DEFAULT_PAGE_SIZE = 50
    MAX_PAGE_SIZE = 100

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'
