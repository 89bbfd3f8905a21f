"""Custom decorators for authorization."""
from functools import wraps
from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from geocheckin import db
from geocheckin.models.user import User, UserRole
from geocheckin.utils.helpers import handle_error

def _load_current_user():
    """Resolve the caller from the token subject; role comes from the row."""
    verify_jwt_in_request()
    user = db.session.get(User, get_jwt_identity())
    if user is None or not user.is_active:
        return None
    g.current_user = user
    return user

def login_required(f):
    """Decorator to require any authenticated, active user."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()
        
        if not user:
            return handle_error("User not found", 401)
        
        return f(*args, **kwargs)
    return decorated_function

def lecturer_required(f):
    """Decorator to require lecturer role or higher."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()
        
        if not user:
            return handle_error("User not found", 401)
        
        if not user.is_lecturer():
            return handle_error("Lecturer access required", 403)
        
        return f(*args, **kwargs)
    return decorated_function

def student_required(f):
    """Decorator to require student role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()
        
        if not user:
            return handle_error("User not found", 401)
        
        if user.role != UserRole.STUDENT:
            return handle_error("Student access required", 403)
        
        return f(*args, **kwargs)
    return decorated_function
