"""Models package with all models."""
from .base import BaseModel, utcnow
from .user import User, UserRole
from .location import Location
from .attendance_session import AttendanceSession, SessionStatus, WindowStrategy
from .attendance import AttendanceRecord
from .attendance_rules import AttendanceRules
from .enrollment import Enrollment

__all__ = [
    'BaseModel', 'utcnow', 'User', 'UserRole',
    'Location', 'AttendanceSession', 'SessionStatus', 'WindowStrategy',
    'AttendanceRecord', 'AttendanceRules', 'Enrollment'
]
