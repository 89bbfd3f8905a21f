# File: backend/geocheckin/api/enrollments.py
"""Course roster API - Lecturer only."""
import logging
from flask import Blueprint, request, g
from geocheckin import db
from geocheckin.services.enrollment_service import EnrollmentService
from geocheckin.utils.decorators import lecturer_required
from geocheckin.utils.helpers import success_response, error_response
from geocheckin.utils.validators import ValidationError

logger = logging.getLogger(__name__)

enrollments_bp = Blueprint('enrollments', __name__)

@enrollments_bp.route('/', methods=['POST'])
@lecturer_required
def enroll_students():
    """Add students to a course roster."""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return error_response("Request body must be JSON", 400)
        
        results = EnrollmentService.enroll(
            data.get('course_code'),
            data.get('student_ids'),
            g.current_user
        )
        
        return success_response(
            data=results,
            message=f"{len(results['enrolled'])} student(s) enrolled"
        ), 201
        
    except ValidationError as e:
        return error_response(e.message, 400, e.errors)
    except Exception:
        db.session.rollback()
        logger.error("Error enrolling students", exc_info=True)
        return error_response("Error enrolling students", 500)

@enrollments_bp.route('/', methods=['GET'])
@lecturer_required
def get_roster():
    course_code = request.args.get('course_code', '').strip()
    if not course_code:
        return error_response("course_code query parameter is required", 400)
    
    return success_response(data=EnrollmentService.roster(course_code))
