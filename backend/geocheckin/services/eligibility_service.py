# backend/geocheckin/services/eligibility_service.py
"""Decides whether a student may check in to a session right now."""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from geocheckin.models.attendance import AttendanceRecord
from geocheckin.models.attendance_rules import AttendanceRules
from geocheckin.models.attendance_session import AttendanceSession
from geocheckin.models.base import utcnow
from geocheckin.models.enrollment import Enrollment
from geocheckin.models.location import Location
from geocheckin.services.gps_service import GPSService

logger = logging.getLogger(__name__)

class IneligibleReason(Enum):
    """Machine-readable reasons a check-in is refused."""
    COORDINATES_OUT_OF_RANGE = 'coordinates_out_of_range'
    LOCATION_DATA_UNAVAILABLE = 'location_data_unavailable'
    SESSION_NOT_FOUND = 'session_not_found'
    SESSION_NOT_STARTED = 'session_not_started'
    SESSION_EXPIRED = 'session_expired'
    NOT_ENROLLED = 'not_enrolled'
    ALREADY_CHECKED_IN = 'already_checked_in'
    NO_LOCATION_BOUND = 'no_location_bound'
    LOCATION_TOO_FAR = 'location_too_far'

REASON_MESSAGES = {
    IneligibleReason.COORDINATES_OUT_OF_RANGE: 'Invalid coordinates',
    IneligibleReason.LOCATION_DATA_UNAVAILABLE: 'Location verification required but GPS data not available',
    IneligibleReason.SESSION_NOT_FOUND: 'Session not found',
    IneligibleReason.SESSION_NOT_STARTED: 'Session has not started yet',
    IneligibleReason.SESSION_EXPIRED: 'Session has expired',
    IneligibleReason.NOT_ENROLLED: 'You are not enrolled in this course',
    IneligibleReason.ALREADY_CHECKED_IN: 'You have already checked in to this session',
    IneligibleReason.NO_LOCATION_BOUND: 'This session has no check-in location',
}

def round_meters(distance: float) -> int:
    """Round half up to whole meters."""
    return int(distance + 0.5)

def too_far_message(distance: float, radius: int) -> str:
    return (
        f"You are {round_meters(distance)}m away from the class location. "
        f"Please move closer (within {radius}m)"
    )

@dataclass
class EligibilityResult:
    """Outcome of one eligibility check."""
    eligible: bool
    reason: Optional[IneligibleReason] = None
    message: str = ''
    distance: Optional[float] = None
    allowed_radius: Optional[int] = None
    session: Optional[AttendanceSession] = None
    location: Optional[Location] = None
    rules: Optional[AttendanceRules] = None

    @classmethod
    def refuse(cls, reason: IneligibleReason, message: str = None, **kwargs) -> 'EligibilityResult':
        return cls(
            eligible=False,
            reason=reason,
            message=message or REASON_MESSAGES[reason],
            **kwargs
        )

    @property
    def rounded_distance(self) -> Optional[int]:
        if self.distance is None:
            return None
        return round_meters(self.distance)

class EligibilityResolver:
    """Runs the ordered eligibility checks against an injected DB session.

    Cheap input checks run before any storage access. The duplicate check
    here is only an early exit; the unique constraint on attendance records
    is what prevents double check-ins.
    """

    def __init__(self, session, config: Dict, clock: Callable[[], datetime] = None):
        self.session = session
        self.default_radius = config['DEFAULT_GEOFENCE_RADIUS_METERS']
        self.enrollment_required = config.get('ENROLLMENT_REQUIRED', False)
        self.clock = clock or utcnow

    def resolve(
        self,
        session_id: str,
        student_id: str,
        latitude: Optional[float],
        longitude: Optional[float],
        now: datetime = None
    ) -> EligibilityResult:
        """Return Eligible(distance) or Ineligible(reason)."""
        # 1. Input coordinates, no storage access
        if latitude is None or longitude is None:
            return EligibilityResult.refuse(IneligibleReason.LOCATION_DATA_UNAVAILABLE)

        is_valid, error = GPSService.validate_coordinates(latitude, longitude)
        if not is_valid:
            return EligibilityResult.refuse(IneligibleReason.COORDINATES_OUT_OF_RANGE, error)

        # 2. Session
        attendance_session = self.load_session(session_id)
        if attendance_session is None:
            return EligibilityResult.refuse(IneligibleReason.SESSION_NOT_FOUND)

        rules = self.load_rules(attendance_session)

        # 3. Window
        window = self.check_window(attendance_session, rules, now or self.clock())
        if window is not None:
            return window

        # Roster gate, off unless configured
        if self.enrollment_required and not self.is_enrolled(attendance_session, student_id):
            return EligibilityResult.refuse(
                IneligibleReason.NOT_ENROLLED,
                f"You are not enrolled in {attendance_session.course_code}",
                session=attendance_session
            )

        # 4. Duplicate pre-check
        if self.has_checked_in(attendance_session.id, student_id):
            return EligibilityResult.refuse(
                IneligibleReason.ALREADY_CHECKED_IN,
                session=attendance_session
            )

        # 5. Location, deleted or unset fails closed
        location = self.load_location(attendance_session)
        if location is None:
            return EligibilityResult.refuse(
                IneligibleReason.NO_LOCATION_BOUND,
                session=attendance_session
            )

        # 6-7. Radius and distance
        radius = self.allowed_radius(rules, location)
        distance = GPSService.calculate_distance(
            latitude, longitude,
            location.latitude, location.longitude
        )

        context = dict(
            distance=distance,
            allowed_radius=radius,
            session=attendance_session,
            location=location,
            rules=rules
        )

        if not GPSService.is_within_radius(distance, radius):
            return EligibilityResult.refuse(
                IneligibleReason.LOCATION_TOO_FAR,
                too_far_message(distance, radius),
                **context
            )

        return EligibilityResult(eligible=True, **context)

    def check_window(
        self,
        attendance_session: AttendanceSession,
        rules: Optional[AttendanceRules],
        now: datetime
    ) -> Optional[EligibilityResult]:
        """None when the window is open, otherwise the refusal."""
        auto_close = rules.auto_close_minutes if rules else None

        if attendance_session.is_expired(now, auto_close):
            return EligibilityResult.refuse(
                IneligibleReason.SESSION_EXPIRED,
                session=attendance_session
            )

        if not attendance_session.has_started(now):
            return EligibilityResult.refuse(
                IneligibleReason.SESSION_NOT_STARTED,
                session=attendance_session
            )

        return None

    def allowed_radius(self, rules: Optional[AttendanceRules], location: Location) -> int:
        """Rules override, then the location's radius, then the configured default."""
        if rules is not None and rules.location_radius_meters:
            return rules.location_radius_meters
        if location.radius:
            return location.radius
        return self.default_radius

    def load_session(self, session_id: str) -> Optional[AttendanceSession]:
        if not session_id or not isinstance(session_id, str):
            return None
        return self.session.get(AttendanceSession, session_id)

    def load_rules(self, attendance_session: AttendanceSession) -> Optional[AttendanceRules]:
        return (
            self.session.query(AttendanceRules)
            .filter_by(session_id=attendance_session.id)
            .first()
        )

    def load_location(self, attendance_session: AttendanceSession) -> Optional[Location]:
        if not attendance_session.location_id:
            return None
        return self.session.get(Location, attendance_session.location_id)

    def is_enrolled(self, attendance_session: AttendanceSession, student_id: str) -> bool:
        return (
            self.session.query(Enrollment.id)
            .filter_by(course_code=attendance_session.course_code, student_id=student_id)
            .first()
        ) is not None

    def has_checked_in(self, session_id: str, student_id: str) -> bool:
        return (
            self.session.query(AttendanceRecord.id)
            .filter_by(session_id=session_id, student_id=student_id)
            .first()
        ) is not None

class LocationVerifier:
    """Dry-run location check. Never writes an attendance record.

    With GPS it reports the full eligibility answer. Without GPS it can fall
    back to IP geolocation, but only when the session's rules do not require
    location, and the IP result never denies.
    """

    def __init__(self, resolver: EligibilityResolver, ip_service=None):
        self.resolver = resolver
        self.ip_service = ip_service

    def verify(
        self,
        session_id: str,
        student_id: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        client_ip: Optional[str] = None
    ) -> Dict:
        try:
            if latitude is not None and longitude is not None:
                return self._verify_gps(session_id, student_id, latitude, longitude)
            return self._verify_without_gps(session_id, client_ip)
        except SQLAlchemyError:
            logger.error("Location verification failed for session %s", session_id, exc_info=True)
            self.resolver.session.rollback()
            return {'verified': False, 'method': 'none', 'error': 'Location verification failed'}

    def _verify_gps(self, session_id, student_id, latitude, longitude) -> Dict:
        result = self.resolver.resolve(session_id, student_id, latitude, longitude)

        response = {
            'verified': result.eligible,
            'method': 'gps' if result.distance is not None else 'none'
        }
        if result.distance is not None:
            response['distance'] = result.rounded_distance
        if not result.eligible:
            response['error'] = result.message
            response['reason'] = result.reason.value
        return response

    def _verify_without_gps(self, session_id, client_ip) -> Dict:
        attendance_session = self.resolver.load_session(session_id)
        if attendance_session is None:
            return {'verified': False, 'method': 'none', 'error': REASON_MESSAGES[IneligibleReason.SESSION_NOT_FOUND]}

        rules = self.resolver.load_rules(attendance_session)
        window = self.resolver.check_window(attendance_session, rules, self.resolver.clock())
        if window is not None:
            return {'verified': False, 'method': 'none', 'error': window.message}

        require_location = rules.require_location if rules is not None else True

        if require_location:
            return {
                'verified': False,
                'method': 'none',
                'error': REASON_MESSAGES[IneligibleReason.LOCATION_DATA_UNAVAILABLE]
            }

        if client_ip:
            approximate = self.ip_service.lookup(client_ip) if self.ip_service else None
            logger.info(
                "Session %s verified via IP %s (approximate location: %s)",
                session_id, client_ip, approximate
            )
            response = {
                'verified': True,
                'method': 'ip',
                'error': 'GPS unavailable, verified via IP'
            }
            # Audit only, never compared against the geofence
            if approximate is not None:
                response['approximateLocation'] = approximate
            return response

        return {'verified': True, 'method': 'none'}
