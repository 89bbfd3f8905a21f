"""Validation utilities for the application."""
import math
import re
from datetime import datetime, timezone
from typing import Dict, List, Any, Optional

class ValidationError(Exception):
    """Raised for malformed client input; maps to HTTP 400."""
    
    def __init__(self, message: str, errors: List[str] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or [message]

class Validator:
    """Validation helper class."""
    
    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(pattern, email))
    
    @staticmethod
    def validate_password(password: str) -> Dict[str, Any]:
        """Validate password strength."""
        errors = []
        
        if not password:
            errors.append("Password is required")
        elif len(password) < 6:
            errors.append("Password must be at least 6 characters long")
        elif len(password) > 128:
            errors.append("Password is too long")
        
        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }
    
    @staticmethod
    def validate_name(name: str) -> Dict[str, Any]:
        """Validate user or location name."""
        errors = []
        
        if not isinstance(name, str) or not name.strip():
            errors.append("Name is required")
        elif len(name.strip()) < 2:
            errors.append("Name must be at least 2 characters long")
        elif len(name.strip()) > 255:
            errors.append("Name is too long")
        
        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }
    
    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        """Validate required fields in data.
        
        Absent, None and empty strings count as missing; 0.0 coordinates pass.
        """
        errors = []
        
        for field in required_fields:
            if field not in data or data[field] is None or data[field] == '':
                errors.append(f"{field} is required")
        
        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }
    
    @staticmethod
    def is_number(value) -> bool:
        """True for finite ints/floats; bools and ints beyond float range are rejected."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        try:
            return math.isfinite(float(value))
        except OverflowError:
            return False
    
    @staticmethod
    def coerce_positive_int(value, field: str, minimum: int = 1) -> int:
        """Accept whole numbers (3 or 3.0) at or above minimum."""
        if not Validator.is_number(value) or float(value) != int(value):
            raise ValidationError(f"{field} must be a whole number")
        if int(value) < minimum:
            raise ValidationError(f"{field} must be at least {minimum}")
        return int(value)
    
    @staticmethod
    def parse_datetime(value, field: str) -> Optional[datetime]:
        """Parse ISO-8601 into a naive UTC datetime."""
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be an ISO-8601 string")
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            raise ValidationError(f"{field} must be an ISO-8601 string")
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed
