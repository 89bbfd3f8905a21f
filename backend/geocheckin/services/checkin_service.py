# backend/geocheckin/services/checkin_service.py
"""Check-in coordinator: the only writer of attendance records."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from geocheckin.models.attendance import AttendanceRecord
from geocheckin.models.base import utcnow
from geocheckin.services.eligibility_service import (
    EligibilityResolver,
    EligibilityResult,
    IneligibleReason,
    REASON_MESSAGES,
    round_meters,
)

logger = logging.getLogger(__name__)

STORAGE_UNAVAILABLE = 'storage_unavailable'

@dataclass
class CheckInResult:
    """Outcome of a check-in attempt.

    ``retryable`` is only ever set for infrastructure failures; semantic
    refusals carry a ``reason`` and must not be retried.
    """
    success: bool
    message: str
    reason: Optional[IneligibleReason] = None
    record: Optional[AttendanceRecord] = None
    distance: Optional[int] = None
    allowed_radius: Optional[int] = None
    retryable: bool = False

    @property
    def error_code(self) -> Optional[str]:
        if self.success:
            return None
        if self.reason is not None:
            return self.reason.value
        return STORAGE_UNAVAILABLE

    @classmethod
    def refused(cls, eligibility: EligibilityResult) -> 'CheckInResult':
        return cls(
            success=False,
            message=eligibility.message,
            reason=eligibility.reason,
            distance=eligibility.rounded_distance,
            allowed_radius=eligibility.allowed_radius
        )

    @classmethod
    def duplicate(cls) -> 'CheckInResult':
        return cls(
            success=False,
            message=REASON_MESSAGES[IneligibleReason.ALREADY_CHECKED_IN],
            reason=IneligibleReason.ALREADY_CHECKED_IN
        )

    @classmethod
    def unavailable(cls) -> 'CheckInResult':
        return cls(
            success=False,
            message='Failed to record attendance. Please try again',
            retryable=True
        )

class CheckInService:
    """Validates and records one check-in per request.

    The DB session is injected so each worker (and each test) supplies its
    own; nothing is shared in-process between requests.
    """

    def __init__(
        self,
        session,
        config: Dict,
        clock: Callable[[], datetime] = None,
        resolver: EligibilityResolver = None
    ):
        self.session = session
        self.clock = clock or utcnow
        self.default_lateness_minutes = config.get('DEFAULT_LATENESS_THRESHOLD_MINUTES', 15)
        self.resolver = resolver or EligibilityResolver(session, config, clock=self.clock)

    def check_in(
        self,
        student_id: str,
        session_id: str,
        latitude: Optional[float],
        longitude: Optional[float],
        device_info: Optional[Dict] = None
    ) -> CheckInResult:
        """Re-resolve eligibility, then insert the record as the last step."""
        try:
            eligibility = self.resolver.resolve(session_id, student_id, latitude, longitude)
        except SQLAlchemyError:
            logger.error("Eligibility lookup failed for session %s", session_id, exc_info=True)
            self._rollback()
            return CheckInResult.unavailable()

        if not eligibility.eligible:
            logger.info(
                "Check-in refused: student=%s session=%s reason=%s",
                student_id, session_id, eligibility.reason.value
            )
            return CheckInResult.refused(eligibility)

        now = self.clock()
        distance = round_meters(eligibility.distance)
        record = AttendanceRecord(
            session_id=eligibility.session.id,
            student_id=student_id,
            latitude=float(latitude),
            longitude=float(longitude),
            distance_meters=distance,
            checked_in_at=now,
            verification_method='gps',
            is_late=self._is_late(eligibility, now),
            device_info=device_info
        )

        try:
            self.session.add(record)
            self.session.commit()
        except IntegrityError:
            self._rollback()
            if self._record_exists(eligibility.session.id, student_id):
                logger.info(
                    "Concurrent duplicate check-in rejected: student=%s session=%s",
                    student_id, session_id
                )
                return CheckInResult.duplicate()
            logger.error("Attendance insert violated a constraint", exc_info=True)
            return CheckInResult.unavailable()
        except SQLAlchemyError:
            self._rollback()
            logger.error("Attendance insert failed for session %s", session_id, exc_info=True)
            return CheckInResult.unavailable()

        logger.info(
            "Check-in recorded: student=%s session=%s distance=%sm",
            student_id, session_id, distance
        )
        return CheckInResult(
            success=True,
            message=f"Successfully checked in to {eligibility.session.course_code}!",
            record=record,
            distance=distance,
            allowed_radius=eligibility.allowed_radius
        )

    def _is_late(self, eligibility: EligibilityResult, now: datetime) -> bool:
        rules = eligibility.rules
        threshold = rules.lateness_threshold_minutes if rules is not None else self.default_lateness_minutes
        return now > eligibility.session.starts_at + timedelta(minutes=threshold)

    def _record_exists(self, session_id: str, student_id: str) -> bool:
        try:
            return self.resolver.has_checked_in(session_id, student_id)
        except SQLAlchemyError:
            self._rollback()
            logger.error("Could not re-read attendance after a constraint violation", exc_info=True)
            return False

    def _rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback failed", exc_info=True)
