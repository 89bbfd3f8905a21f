"""Helper functions for the application."""
from flask import has_request_context, jsonify, request
from typing import Any, Dict, Optional

# Failures raised before the check-in view runs still use its envelope
CHECKIN_ENDPOINT = 'attendance.check_in'

CHECKIN_ERROR_CODES = {
    401: 'unauthenticated',
    403: 'forbidden',
    429: 'rate_limited',
}

def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    if has_request_context() and request.endpoint == CHECKIN_ENDPOINT:
        return checkin_response(
            False,
            str(error),
            status_code,
            error=CHECKIN_ERROR_CODES.get(status_code, 'request_failed')
        )
    
    return jsonify({
        'error': True,
        'message': str(error),
        'status_code': status_code
    }), status_code

def success_response(data: Any = None, message: str = "Success"):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }
    
    if data is not None:
        response['data'] = data
    
    return jsonify(response)

def error_response(message: str, status_code: int = 400, errors: list = None):
    """Return consistent error response."""
    response = {
        'error': True,
        'message': message,
        'status_code': status_code
    }
    
    if errors:
        response['errors'] = errors
    
    return jsonify(response), status_code

def checkin_response(
    success: bool,
    message: str,
    status_code: int,
    data: Optional[Dict] = None,
    error: Optional[str] = None,
    details: Optional[Dict] = None,
    retryable: bool = False
):
    """Envelope used by the check-in endpoint: {success, message, data?, error?}."""
    response = {
        'success': success,
        'message': message
    }
    
    if data is not None:
        response['data'] = data
    if error is not None:
        response['error'] = error
    if details:
        response['details'] = details
    if retryable:
        response['retryable'] = True
    
    return jsonify(response), status_code

def isoformat(value) -> Optional[str]:
    """Serialize a naive UTC datetime with an explicit offset."""
    if value is None:
        return None
    return value.isoformat() + 'Z'
