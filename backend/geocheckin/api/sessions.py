# File: backend/geocheckin/api/sessions.py
"""Session management API."""
import logging
from flask import Blueprint, request, g
from geocheckin import db
from geocheckin.models.base import utcnow
from geocheckin.models.location import Location
from geocheckin.services.session_service import SessionService
from geocheckin.utils.decorators import lecturer_required, login_required
from geocheckin.utils.helpers import success_response, error_response
from geocheckin.utils.validators import ValidationError

logger = logging.getLogger(__name__)

sessions_bp = Blueprint('sessions', __name__)

def _serialize(attendance_session, now=None):
    rules = attendance_session.rules
    data = attendance_session.to_dict(
        now=now or utcnow(),
        auto_close_minutes=rules.auto_close_minutes if rules else None
    )
    location = None
    if attendance_session.location_id:
        location = db.session.get(Location, attendance_session.location_id)
    data['location'] = location.to_dict() if location else None
    return data

@sessions_bp.route('/', methods=['POST'])
@lecturer_required
def create_session():
    """Create a check-in session at one of the caller's locations."""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return error_response("Request body must be JSON", 400)
        
        attendance_session = SessionService.create_session(g.current_user, data)
        
        return success_response(
            data=_serialize(attendance_session),
            message=f"Session created for {attendance_session.course_code}! Students can now check in."
        ), 201
        
    except ValidationError as e:
        db.session.rollback()
        return error_response(e.message, 400, e.errors)
    except Exception:
        db.session.rollback()
        logger.error("Error creating session", exc_info=True)
        return error_response("Failed to create session", 500)

@sessions_bp.route('/', methods=['GET'])
@lecturer_required
def get_my_sessions():
    """List sessions the caller created."""
    now = utcnow()
    sessions = SessionService.list_for_owner(g.current_user)
    return success_response(data=[_serialize(s, now) for s in sessions])

@sessions_bp.route('/active', methods=['GET'])
@login_required
def get_active_sessions():
    """Sessions currently accepting check-ins."""
    now = utcnow()
    sessions = SessionService.list_active(now)
    return success_response(data=[_serialize(s, now) for s in sessions])

@sessions_bp.route('/<session_id>', methods=['GET'])
@lecturer_required
def get_session(session_id):
    attendance_session = SessionService.get_owned(session_id, g.current_user)
    if attendance_session is None:
        return error_response("Session not found", 404)
    
    return success_response(data=_serialize(attendance_session))

@sessions_bp.route('/<session_id>/end', methods=['POST'])
@lecturer_required
def end_session(session_id):
    """End a session early; students can no longer check in."""
    try:
        attendance_session = SessionService.get_owned(session_id, g.current_user)
        if attendance_session is None:
            return error_response("Session not found", 404)
        
        SessionService.end_session(attendance_session)
        
        return success_response(
            data=_serialize(attendance_session),
            message="Session ended successfully"
        )
        
    except ValidationError as e:
        return error_response(e.message, 400)
    except Exception:
        db.session.rollback()
        logger.error("Error ending session %s", session_id, exc_info=True)
        return error_response("Failed to end session", 500)

@sessions_bp.route('/<session_id>/rules', methods=['GET'])
@lecturer_required
def get_rules(session_id):
    attendance_session = SessionService.get_owned(session_id, g.current_user)
    if attendance_session is None:
        return error_response("Session not found", 404)
    
    return success_response(data=SessionService.get_rules(attendance_session))

@sessions_bp.route('/<session_id>/rules', methods=['PUT'])
@lecturer_required
def update_rules(session_id):
    """Create or update attendance rules for a session."""
    try:
        attendance_session = SessionService.get_owned(session_id, g.current_user)
        if attendance_session is None:
            return error_response("Session not found", 404)
        
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return error_response("Request body must be JSON", 400)
        
        rules = SessionService.upsert_rules(attendance_session, data)
        
        return success_response(
            data=SessionService.rules_to_dict(rules),
            message="Rules saved successfully"
        )
        
    except ValidationError as e:
        db.session.rollback()
        return error_response(e.message, 400, e.errors)
    except Exception:
        db.session.rollback()
        logger.error("Error saving rules for session %s", session_id, exc_info=True)
        return error_response("Failed to save rules", 500)

@sessions_bp.route('/<session_id>/attendance', methods=['GET'])
@lecturer_required
def get_session_attendance(session_id):
    """Records captured for one session."""
    attendance_session = SessionService.get_owned(session_id, g.current_user)
    if attendance_session is None:
        return error_response("Session not found", 404)
    
    records = SessionService.session_attendance(attendance_session)
    return success_response(data={
        'session_id': attendance_session.id,
        'course_code': attendance_session.course_code,
        'total': len(records),
        'records': records
    })
