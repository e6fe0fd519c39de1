import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import DeadlineStatusEnum, URGENT_WINDOW_DAYS, UPCOMING_WINDOW_DAYS
from lms.crud.enrollment import enrollment as crud_enrollment
from lms.models.enrollment import Enrollment
from lms.schemas.progress import DeadlineEntry

logger = logging.getLogger(__name__)


def classify_deadline(
    deadline: Optional[datetime],
    completed_at: Optional[datetime],
    now: datetime,
) -> Tuple[DeadlineStatusEnum, Optional[int]]:
    """Classify an effective deadline against ``now``.

    Returns the status and the whole days remaining, truncated toward zero
    (negative once overdue, None without a deadline).
    """
    days_remaining = None
    if deadline is not None:
        days_remaining = int((deadline - now).total_seconds() / 86400)

    if completed_at is not None:
        return DeadlineStatusEnum.COMPLETED, days_remaining
    if deadline is None:
        return DeadlineStatusEnum.NO_DEADLINE, None
    if deadline < now:
        return DeadlineStatusEnum.OVERDUE, days_remaining
    if deadline < now + timedelta(days=URGENT_WINDOW_DAYS):
        return DeadlineStatusEnum.URGENT, days_remaining
    if deadline < now + timedelta(days=UPCOMING_WINDOW_DAYS):
        return DeadlineStatusEnum.UPCOMING, days_remaining
    return DeadlineStatusEnum.ON_TRACK, days_remaining


def effective_deadline(enrollment: Enrollment, capabilities: SchemaCapabilities) -> Optional[datetime]:
    if not capabilities.deadlines:
        return None
    if enrollment.deadline is not None:
        return enrollment.deadline
    return enrollment.course.deadline if enrollment.course else None


def classify_enrollment(
    enrollment: Enrollment, capabilities: SchemaCapabilities, now: datetime
) -> Tuple[DeadlineStatusEnum, Optional[int]]:
    return classify_deadline(effective_deadline(enrollment, capabilities), enrollment.completed_at, now)


def is_overdue(enrollment: Enrollment, capabilities: SchemaCapabilities, now: datetime) -> bool:
    status, _ = classify_enrollment(enrollment, capabilities, now)
    return status == DeadlineStatusEnum.OVERDUE


class DeadlineService:

    def get_deadlines(
        self, db: Session, *, user_id: int, capabilities: SchemaCapabilities, now: Optional[datetime] = None
    ) -> List[DeadlineEntry]:
        now = now or datetime.utcnow()
        if capabilities.deadlines:
            self.refresh_overdue_flags(db, capabilities=capabilities, user_id=user_id, now=now)

        entries = []
        for enrollment in crud_enrollment.get_by_user(db, user_id=user_id):
            deadline = effective_deadline(enrollment, capabilities)
            status, days_remaining = classify_deadline(deadline, enrollment.completed_at, now)
            entries.append(DeadlineEntry(
                enrollment_id=enrollment.id,
                course_id=enrollment.course_id,
                title=enrollment.course.title,
                is_mandatory=bool(enrollment.course.is_mandatory) if capabilities.deadlines else False,
                deadline=deadline,
                completed_at=enrollment.completed_at,
                enrolled_at=enrollment.enrolled_at,
                status=status,
                days_remaining=days_remaining,
            ))

        # incomplete first, then soonest deadline, undated last
        entries.sort(key=lambda e: (
            e.completed_at is not None,
            e.deadline is None,
            e.deadline or datetime.max,
        ))
        return entries

    def refresh_overdue_flags(
        self,
        db: Session,
        *,
        capabilities: SchemaCapabilities,
        user_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Bring the cached is_overdue flag in line with the live classification.

        Returns the number of enrollments whose flag changed.
        """
        if not capabilities.deadlines:
            return 0
        now = now or datetime.utcnow()

        query = db.query(Enrollment)
        if user_id is not None:
            query = query.filter(Enrollment.user_id == user_id)

        changed = 0
        for enrollment in query.all():
            flag = is_overdue(enrollment, capabilities, now)
            if bool(enrollment.is_overdue) != flag:
                enrollment.is_overdue = flag
                changed += 1
        if changed:
            db.flush()
            logger.info(f"Updated is_overdue on {changed} enrollment(s)")
        return changed


deadline_service = DeadlineService()
