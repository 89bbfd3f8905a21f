# backend/geocheckin/services/enrollment_service.py
"""Course roster used by the optional enrollment gate."""
import logging
from typing import Dict, List

from geocheckin import db
from geocheckin.models.enrollment import Enrollment
from geocheckin.models.user import User, UserRole
from geocheckin.utils.validators import ValidationError

logger = logging.getLogger(__name__)

class EnrollmentService:
    """Service for managing course rosters."""
    
    @staticmethod
    def enroll(course_code: str, student_ids: List[str], added_by: User) -> Dict:
        """Enroll students in a course; already-enrolled ids are skipped."""
        if not isinstance(course_code, str) or not course_code.strip():
            raise ValidationError("course_code is required")
        if not isinstance(student_ids, list) or not student_ids:
            raise ValidationError("student_ids must be a non-empty list")
        
        course_code = course_code.strip()
        results = {'enrolled': [], 'skipped': [], 'invalid': []}
        
        for student_id in dict.fromkeys(student_ids):
            student = db.session.get(User, student_id) if isinstance(student_id, str) else None
            if student is None or student.role != UserRole.STUDENT:
                results['invalid'].append(student_id)
                continue
            
            exists = Enrollment.query.filter_by(
                course_code=course_code,
                student_id=student.id
            ).first()
            if exists:
                results['skipped'].append(student.id)
                continue
            
            db.session.add(Enrollment(
                course_code=course_code,
                student_id=student.id,
                added_by=added_by.id
            ))
            results['enrolled'].append(student.id)
        
        db.session.commit()
        logger.info(
            "Roster %s: %d enrolled, %d skipped, %d invalid",
            course_code, len(results['enrolled']), len(results['skipped']), len(results['invalid'])
        )
        return results
    
    @staticmethod
    def roster(course_code: str) -> List[Dict]:
        enrollments = (
            Enrollment.query
            .filter_by(course_code=course_code)
            .order_by(Enrollment.created_at.asc())
            .all()
        )
        return [
            {
                'student_id': e.student_id,
                'name': e.student.name,
                'email': e.student.email,
                'enrolled_at': e.created_at.isoformat()
            }
            for e in enrollments
        ]
