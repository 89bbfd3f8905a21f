"""Per-session attendance rule overrides."""
from geocheckin import db
from geocheckin.models.base import BaseModel

class AttendanceRules(BaseModel):
    """Optional overrides for one session."""
    
    __tablename__ = 'attendance_rules'
    
    session_id = db.Column(
        db.String(36),
        db.ForeignKey('attendance_sessions.id'),
        unique=True,
        nullable=False
    )
    
    # None falls back to the location's radius
    location_radius_meters = db.Column(db.Integer, nullable=True)
    lateness_threshold_minutes = db.Column(db.Integer, nullable=False, default=15)
    auto_close_minutes = db.Column(db.Integer, nullable=True)
    require_location = db.Column(db.Boolean, nullable=False, default=True)
    require_biometric = db.Column(db.Boolean, nullable=False, default=False)
    
    session = db.relationship(
        'AttendanceSession',
        backref=db.backref('rules', uselist=False)
    )
    
    def __repr__(self):
        return f'<AttendanceRules {self.session_id}>'
