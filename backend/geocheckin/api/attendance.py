# File: backend/geocheckin/api/attendance.py
"""Attendance API: geofenced check-in and location dry-run."""
import logging
from flask import Blueprint, request, g, current_app, jsonify
from geocheckin import db, limiter
from geocheckin.models.attendance import AttendanceRecord
from geocheckin.services.checkin_service import CheckInService
from geocheckin.services.eligibility_service import (
    EligibilityResolver,
    IneligibleReason,
    LocationVerifier,
)
from geocheckin.services.ip_geolocation_service import IPGeolocationService
from geocheckin.utils.decorators import student_required
from geocheckin.utils.helpers import checkin_response, success_response, isoformat
from geocheckin.utils.validators import Validator

logger = logging.getLogger(__name__)

attendance_bp = Blueprint('attendance', __name__)

# Semantic refusals are 400 except a missing session
REASON_STATUS = {
    IneligibleReason.SESSION_NOT_FOUND: 404,
}

def _checkin_rate_limit():
    return current_app.config.get('CHECKIN_RATE_LIMIT', '10 per minute')

def _parse_coordinates(data, required: bool):
    """Return (latitude, longitude, error). Missing values stay None unless required."""
    latitude = data.get('latitude')
    longitude = data.get('longitude')
    
    if latitude is None and longitude is None and not required:
        return None, None, None
    
    if latitude is None or longitude is None:
        return None, None, "sessionId, latitude, and longitude are required"
    
    if not Validator.is_number(latitude) or not Validator.is_number(longitude):
        return None, None, "Latitude and longitude must be numbers"
    
    return float(latitude), float(longitude), None

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/checkin', methods=['POST'])
@limiter.limit(_checkin_rate_limit)
@student_required
def check_in():
    """Record attendance for the authenticated student.
    
    The student id always comes from the token, never from the body.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return checkin_response(False, 'Missing required fields', 400,
                                error='sessionId, latitude, and longitude are required')
    
    session_id = data.get('sessionId')
    if not isinstance(session_id, str) or not session_id.strip():
        return checkin_response(False, 'Missing required fields', 400,
                                error='sessionId, latitude, and longitude are required')
    
    latitude, longitude, error = _parse_coordinates(data, required=True)
    if error:
        return checkin_response(False, 'Missing required fields', 400, error=error)
    
    device_info = data.get('deviceInfo')
    if device_info is not None and not isinstance(device_info, dict):
        return checkin_response(False, 'Invalid device info', 400, error='deviceInfo must be an object')
    
    service = CheckInService(db.session, current_app.config)
    result = service.check_in(
        student_id=g.current_user.id,
        session_id=session_id.strip(),
        latitude=latitude,
        longitude=longitude,
        device_info=device_info
    )
    
    if result.success:
        return checkin_response(True, result.message, 200, data={
            'attendanceId': result.record.id,
            'distance': result.distance,
            'checkedInAt': isoformat(result.record.checked_in_at)
        })
    
    if result.retryable:
        return checkin_response(False, result.message, 500, error=result.error_code, retryable=True)
    
    details = None
    if result.reason == IneligibleReason.LOCATION_TOO_FAR:
        details = {'distance': result.distance, 'allowedRadius': result.allowed_radius}
    
    return checkin_response(
        False,
        result.message,
        REASON_STATUS.get(result.reason, 400),
        error=result.error_code,
        details=details
    )

@attendance_bp.route('/verify-location', methods=['POST'])
@student_required
def verify_location():
    """Dry-run location check. Never records attendance."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data.get('sessionId'):
        return jsonify({'verified': False, 'method': 'none', 'error': 'Missing required parameters'}), 400
    
    latitude, longitude, error = _parse_coordinates(data, required=False)
    if error:
        return jsonify({'verified': False, 'method': 'none', 'error': error}), 400
    
    config = current_app.config
    verifier = LocationVerifier(
        EligibilityResolver(db.session, config),
        IPGeolocationService(config['IP_GEOLOCATION_URL'], config['IP_GEOLOCATION_TIMEOUT'])
    )
    result = verifier.verify(
        str(data['sessionId']),
        g.current_user.id,
        latitude,
        longitude,
        client_ip=IPGeolocationService.client_ip(request)
    )
    return jsonify(result)

@attendance_bp.route('/my-records', methods=['GET'])
@student_required
def get_my_attendance():
    """Get the student's own attendance records."""
    records = (
        AttendanceRecord.query
        .filter_by(student_id=g.current_user.id)
        .order_by(AttendanceRecord.checked_in_at.desc())
        .all()
    )
    
    attendance_data = []
    for record in records:
        attendance_session = record.session
        attendance_data.append({
            'id': record.id,
            'session_id': record.session_id,
            'course_code': attendance_session.course_code if attendance_session else None,
            'checked_in_at': isoformat(record.checked_in_at),
            'distance_meters': record.distance_meters,
            'is_late': record.is_late,
            'verification_method': record.verification_method
        })
    
    return success_response(data={
        'records': attendance_data,
        'total': len(attendance_data)
    })
