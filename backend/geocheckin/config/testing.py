"""Testing configuration."""
from datetime import timedelta

from .base import Config

class TestingConfig(Config):
    """Testing configuration class."""
    
    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    
    # Database (in-memory SQLite for testing)
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    
    # JWT Configuration
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(hours=1)
    
    # Rate Limiting (disabled for testing)
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'
    
    # Pinned so environment overrides never leak into tests
    DEFAULT_GEOFENCE_RADIUS_METERS = 50
    SESSION_WINDOW_STRATEGY = 'fixed'
    SESSION_FIXED_WINDOW_MINUTES = 15
    ENROLLMENT_REQUIRED = False
    IP_GEOLOCATION_URL = 'http://ip-geo.test/json/{ip}'
    
    # Logging
    LOG_LEVEL = 'WARNING'
