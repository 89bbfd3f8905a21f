# File: backend/geocheckin/api/auth.py
"""Authentication API: registration, login and profile."""
import logging
from flask import Blueprint, request, g
from flask_jwt_extended import jwt_required, get_jwt_identity
from geocheckin import db, limiter
from geocheckin.utils.decorators import login_required
from geocheckin.utils.helpers import success_response, error_response
from geocheckin.utils.validators import ValidationError
from geocheckin.services.auth_service import AuthService

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")

@auth_bp.route("/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    """Student self-registration. Any role field in the body is ignored."""
    try:
        data = request.get_json(silent=True)
        
        if not data:
            return error_response("Request body must be JSON", 400)
        
        user = AuthService.register_student(
            data.get("email", ""),
            data.get("password", ""),
            data.get("name", "")
        )
        
        return success_response(
            data=user.to_dict(),
            message="Registration successful"
        ), 201
        
    except ValidationError as e:
        return error_response(e.message, 400, e.errors)
    except Exception:
        db.session.rollback()
        logger.error("Registration failed", exc_info=True)
        return error_response("Registration failed", 500)

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Email/password login for every role."""
    try:
        data = request.get_json(silent=True)
        
        if not data:
            return error_response("Request body must be JSON", 400)
        
        email = str(data.get("email", "")).strip()
        password = data.get("password", "")
        
        if not email or not password:
            return error_response("Email and password are required", 400)
        
        result, error = AuthService.login(email, password)
        
        if error:
            return error_response(error, 401)
        
        return success_response(
            data=result,
            message="Login successful"
        )
        
    except Exception:
        db.session.rollback()
        logger.error("Login failed", exc_info=True)
        return error_response("Login error", 500)

@auth_bp.route("/me", methods=["GET"])
@login_required
def get_current_user():
    """Get current user profile."""
    return success_response(data=g.current_user.to_dict())

@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh_token():
    """Refresh access token."""
    result, error = AuthService.refresh_token(get_jwt_identity())
    
    if error:
        return error_response(error, 401)
    
    return success_response(
        data=result,
        message="Token refreshed successfully"
    )
