"""Time-boxed check-in sessions bound to a location."""
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from geocheckin import db
from geocheckin.models.base import BaseModel

class SessionStatus(Enum):
    """Stored session status; expiry is derived from the clock."""
    ACTIVE = 'active'
    ENDED = 'ended'

class WindowStrategy(Enum):
    """How the check-in window was opened."""
    FIXED = 'fixed'
    SCHEDULED = 'scheduled'

class AttendanceSession(BaseModel):
    """Session students check in to."""
    
    __tablename__ = 'attendance_sessions'
    
    owner_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    course_code = db.Column(db.String(50), nullable=False, index=True)
    course_name = db.Column(db.String(255), nullable=True)
    
    # Locations can be deleted out from under a session
    location_id = db.Column(
        db.String(36),
        db.ForeignKey('locations.id', ondelete='SET NULL'),
        nullable=True
    )
    
    starts_at = db.Column(db.DateTime, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    window_strategy = db.Column(db.Enum(WindowStrategy), nullable=False, default=WindowStrategy.FIXED)
    status = db.Column(db.Enum(SessionStatus), nullable=False, default=SessionStatus.ACTIVE)
    ended_at = db.Column(db.DateTime, nullable=True)
    
    __table_args__ = (
        db.CheckConstraint('expires_at > starts_at', name='ck_session_window'),
    )
    
    owner = db.relationship('User', backref=db.backref('sessions', lazy='dynamic'))
    
    def effective_expiry(self, auto_close_minutes: Optional[int] = None) -> datetime:
        """Window end, shortened by an auto-close rule when one applies."""
        if auto_close_minutes:
            return min(self.expires_at, self.starts_at + timedelta(minutes=auto_close_minutes))
        return self.expires_at
    
    def is_ended(self) -> bool:
        return self.status == SessionStatus.ENDED
    
    def is_expired(self, now: datetime, auto_close_minutes: Optional[int] = None) -> bool:
        """Ended sessions count as expired."""
        return self.is_ended() or now > self.effective_expiry(auto_close_minutes)
    
    def has_started(self, now: datetime) -> bool:
        return now >= self.starts_at
    
    def state_at(self, now: datetime, auto_close_minutes: Optional[int] = None) -> str:
        if self.is_ended():
            return 'ended'
        if self.is_expired(now, auto_close_minutes):
            return 'expired'
        if not self.has_started(now):
            return 'scheduled'
        return 'active'
    
    def to_dict(self, now: datetime = None, auto_close_minutes: Optional[int] = None):
        """Convert to dictionary."""
        data = super().to_dict()
        data['status'] = self.status.value
        data['window_strategy'] = self.window_strategy.value
        if now is not None:
            data['state'] = self.state_at(now, auto_close_minutes)
        return data
    
    def __repr__(self) -> str:
        return f'<AttendanceSession {self.course_code} {self.id}>'
