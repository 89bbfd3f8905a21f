"""Course roster entries."""
from geocheckin import db
from geocheckin.models.base import BaseModel

class Enrollment(BaseModel):
    """A student enrolled in a course code."""
    
    __tablename__ = 'enrollments'
    
    course_code = db.Column(db.String(50), nullable=False, index=True)
    student_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    added_by = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    
    __table_args__ = (
        db.UniqueConstraint('course_code', 'student_id', name='uq_enrollment_course_student'),
    )
    
    student = db.relationship('User', foreign_keys=[student_id])
    
    def __repr__(self):
        return f'<Enrollment {self.course_code}-{self.student_id}>'
