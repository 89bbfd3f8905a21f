"""Attendance record written by a successful check-in."""
from geocheckin import db
from geocheckin.models.base import BaseModel, utcnow

class AttendanceRecord(BaseModel):
    """Attendance record model.
    
    At most one row exists per (session, student); the unique constraint is
    what guarantees it when check-ins race.
    """
    
    __tablename__ = 'attendance_records'
    
    session_id = db.Column(db.String(36), db.ForeignKey('attendance_sessions.id'), nullable=False)
    student_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    checked_in_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    
    # Location where check-in happened
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    distance_meters = db.Column(db.Integer, nullable=True)
    
    verification_method = db.Column(db.String(20), default='gps', nullable=False)
    is_late = db.Column(db.Boolean, default=False, nullable=False)
    
    # Audit only
    device_info = db.Column(db.JSON, nullable=True)
    
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )
    
    session = db.relationship('AttendanceSession', backref=db.backref('records', lazy='dynamic'))
    student = db.relationship('User', backref=db.backref('attendance_records', lazy='dynamic'))
    
    def __repr__(self):
        return f'<AttendanceRecord {self.student_id}-{self.session_id}>'
