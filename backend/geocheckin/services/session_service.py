# backend/geocheckin/services/session_service.py
"""Session lifecycle and per-session attendance rules."""
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from flask import current_app

from geocheckin import db
from geocheckin.models.attendance import AttendanceRecord
from geocheckin.models.attendance_rules import AttendanceRules
from geocheckin.models.attendance_session import AttendanceSession, SessionStatus, WindowStrategy
from geocheckin.models.base import utcnow
from geocheckin.models.user import User
from geocheckin.services.location_service import LocationService
from geocheckin.utils.validators import ValidationError, Validator

logger = logging.getLogger(__name__)

class SessionService:
    """Service for creating and closing check-in sessions."""

    @staticmethod
    def _window(data: Dict, now: datetime):
        """Resolve (strategy, starts_at, expires_at) from config and request.

        Explicit start/end times select the scheduled strategy; otherwise the
        configured default applies.
        """
        starts_at = Validator.parse_datetime(data.get('starts_at'), 'starts_at')
        ends_at = Validator.parse_datetime(data.get('ends_at'), 'ends_at')

        strategy = current_app.config['SESSION_WINDOW_STRATEGY']
        if starts_at or ends_at:
            strategy = WindowStrategy.SCHEDULED.value

        if strategy == WindowStrategy.FIXED.value:
            minutes = current_app.config['SESSION_FIXED_WINDOW_MINUTES']
            if data.get('duration_minutes') is not None:
                minutes = Validator.coerce_positive_int(data['duration_minutes'], 'duration_minutes')
            return WindowStrategy.FIXED, now, now + timedelta(minutes=minutes)

        if strategy != WindowStrategy.SCHEDULED.value:
            raise ValueError(f"Unknown SESSION_WINDOW_STRATEGY: {strategy}")

        if ends_at is None:
            raise ValidationError("ends_at is required for a scheduled session")
        starts_at = starts_at or now

        if ends_at <= starts_at:
            raise ValidationError("ends_at must be after starts_at")
        if ends_at < now:
            raise ValidationError("ends_at cannot be in the past")

        return WindowStrategy.SCHEDULED, starts_at, ends_at

    @staticmethod
    def create_session(owner: User, data: Dict) -> AttendanceSession:
        """Create a session bound to one of the owner's locations."""
        check = Validator.validate_required_fields(data, ['course_code', 'location_id'])
        if not check['is_valid']:
            raise ValidationError("Missing required fields", check['errors'])

        course_code = str(data['course_code']).strip()
        if not course_code:
            raise ValidationError("course_code is required")

        location = LocationService.get_owned(data['location_id'], owner)
        if location is None:
            raise ValidationError("Location not found")

        now = utcnow()
        strategy, starts_at, expires_at = SessionService._window(data, now)

        attendance_session = AttendanceSession(
            owner_id=owner.id,
            course_code=course_code,
            course_name=data.get('course_name'),
            location_id=location.id,
            starts_at=starts_at,
            expires_at=expires_at,
            window_strategy=strategy,
            status=SessionStatus.ACTIVE,
            created_at=now
        )
        db.session.add(attendance_session)
        db.session.flush()

        if data.get('auto_close_minutes') is not None:
            rules = AttendanceRules(
                session_id=attendance_session.id,
                auto_close_minutes=Validator.coerce_positive_int(
                    data['auto_close_minutes'], 'auto_close_minutes'
                ),
                lateness_threshold_minutes=current_app.config['DEFAULT_LATENESS_THRESHOLD_MINUTES']
            )
            db.session.add(rules)

        db.session.commit()

        logger.info(
            "Session %s created for %s at location %s (%s, expires %s)",
            attendance_session.id, course_code, location.id,
            strategy.value, expires_at.isoformat()
        )
        return attendance_session

    @staticmethod
    def get_owned(session_id: str, user: User) -> Optional[AttendanceSession]:
        attendance_session = db.session.get(AttendanceSession, session_id)
        if attendance_session is None:
            return None
        if attendance_session.owner_id != user.id and not user.is_admin():
            return None
        return attendance_session

    @staticmethod
    def list_for_owner(owner: User) -> List[AttendanceSession]:
        return (
            AttendanceSession.query
            .filter_by(owner_id=owner.id)
            .order_by(AttendanceSession.created_at.desc())
            .all()
        )

    @staticmethod
    def list_active(now: datetime = None) -> List[AttendanceSession]:
        """Sessions whose check-in window is open now."""
        now = now or utcnow()
        candidates = (
            AttendanceSession.query
            .filter(
                AttendanceSession.status == SessionStatus.ACTIVE,
                AttendanceSession.starts_at <= now,
                AttendanceSession.expires_at >= now
            )
            .order_by(AttendanceSession.created_at.desc())
            .all()
        )
        return [
            s for s in candidates
            if not s.is_expired(now, s.rules.auto_close_minutes if s.rules else None)
        ]

    @staticmethod
    def end_session(attendance_session: AttendanceSession) -> AttendanceSession:
        """Close the session to new check-ins."""
        if attendance_session.is_ended():
            raise ValidationError("Session has already ended")

        attendance_session.update(status=SessionStatus.ENDED, ended_at=utcnow())
        logger.info("Session %s ended", attendance_session.id)
        return attendance_session

    @staticmethod
    def get_rules(attendance_session: AttendanceSession) -> Dict:
        """Stored rules, or the defaults that apply when none are stored."""
        rules = attendance_session.rules
        if rules is not None:
            return SessionService.rules_to_dict(rules)

        return {
            'session_id': attendance_session.id,
            'location_radius_meters': None,
            'lateness_threshold_minutes': current_app.config['DEFAULT_LATENESS_THRESHOLD_MINUTES'],
            'auto_close_minutes': None,
            'require_location': True,
            'require_biometric': False
        }

    @staticmethod
    def upsert_rules(attendance_session: AttendanceSession, data: Dict) -> AttendanceRules:
        """Create or update the rules row for a session."""
        fields = {}

        if 'location_radius_meters' in data:
            value = data['location_radius_meters']
            fields['location_radius_meters'] = (
                None if value is None
                else Validator.coerce_positive_int(value, 'location_radius_meters')
            )
        if data.get('lateness_threshold_minutes') is not None:
            fields['lateness_threshold_minutes'] = Validator.coerce_positive_int(
                data['lateness_threshold_minutes'], 'lateness_threshold_minutes', minimum=0
            )
        if 'auto_close_minutes' in data:
            value = data['auto_close_minutes']
            fields['auto_close_minutes'] = (
                None if value is None
                else Validator.coerce_positive_int(value, 'auto_close_minutes')
            )
        for flag in ('require_location', 'require_biometric'):
            if flag in data:
                if not isinstance(data[flag], bool):
                    raise ValidationError(f"{flag} must be true or false")
                fields[flag] = data[flag]

        rules = attendance_session.rules
        if rules is None:
            fields.setdefault(
                'lateness_threshold_minutes',
                current_app.config['DEFAULT_LATENESS_THRESHOLD_MINUTES']
            )
            rules = AttendanceRules(session_id=attendance_session.id, **fields)
            rules.save()
        else:
            rules.update(**fields)

        logger.info("Rules updated for session %s: %s", attendance_session.id, sorted(fields))
        return rules

    @staticmethod
    def rules_to_dict(rules: AttendanceRules) -> Dict:
        return rules.to_dict(exclude=['id', 'created_at', 'updated_at'])

    @staticmethod
    def session_attendance(attendance_session: AttendanceSession) -> List[Dict]:
        records = (
            attendance_session.records
            .order_by(AttendanceRecord.checked_in_at.asc())
            .all()
        )
        return [
            {
                'id': record.id,
                'student_id': record.student_id,
                'student_name': record.student.name,
                'checked_in_at': record.checked_in_at.isoformat(),
                'distance_meters': record.distance_meters,
                'is_late': record.is_late
            }
            for record in records
        ]
