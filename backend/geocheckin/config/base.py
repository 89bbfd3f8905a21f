"""Base configuration shared by every environment."""
import os
from datetime import timedelta


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration."""
    
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    
    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'
    
    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]
    
    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day, 50 per hour"
    CHECKIN_RATE_LIMIT = os.getenv('CHECKIN_RATE_LIMIT', '10 per minute')
    
    # Geofence
    DEFAULT_GEOFENCE_RADIUS_METERS = int(os.getenv('DEFAULT_GEOFENCE_RADIUS_METERS', 50))
    
    # Check-in window: 'fixed' opens a window of SESSION_FIXED_WINDOW_MINUTES
    # from creation, 'scheduled' takes explicit start/end times.
    SESSION_WINDOW_STRATEGY = os.getenv('SESSION_WINDOW_STRATEGY', 'fixed')
    SESSION_FIXED_WINDOW_MINUTES = int(os.getenv('SESSION_FIXED_WINDOW_MINUTES', 15))
    DEFAULT_LATENESS_THRESHOLD_MINUTES = 15
    
    # Roster gate
    ENROLLMENT_REQUIRED = _env_bool('ENROLLMENT_REQUIRED', False)
    
    # IP geolocation fallback (dry-run verification only)
    IP_GEOLOCATION_URL = os.getenv('IP_GEOLOCATION_URL', 'http://ip-api.com/json/{ip}')
    IP_GEOLOCATION_TIMEOUT = float(os.getenv('IP_GEOLOCATION_TIMEOUT', 3))
    
    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', 'logs/app.log')
