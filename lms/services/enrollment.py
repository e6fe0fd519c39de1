import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from lms.crud.course import course as crud_course
from lms.crud.enrollment import enrollment as crud_enrollment
from lms.models.enrollment import Enrollment
from lms.services.prerequisite import prerequisite_service

logger = logging.getLogger(__name__)


class EnrollmentService:

    def enroll(
        self,
        db: Session,
        *,
        user_id: int,
        course_id: int,
        capabilities: SchemaCapabilities,
        now: Optional[datetime] = None,
    ) -> Enrollment:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise NotFoundError("Course not found.")

        if crud_enrollment.get_by_user_and_course(db, user_id=user_id, course_id=course_id):
            raise ConflictError("Already enrolled in this course.")

        access = prerequisite_service.check_course(db, user_id=user_id, course=course, capabilities=capabilities)
        if not access.allowed:
            raise ForbiddenError(access.reason, blocking_course_id=access.blocking_course_id)

        values = {
            "user_id": user_id,
            "course_id": course_id,
            "enrolled_at": now or datetime.utcnow(),
        }
        if capabilities.deadlines:
            values["deadline"] = course.deadline

        try:
            enrollment = crud_enrollment.create(db, obj_in=values, commit=False)
        except IntegrityError:
            # lost a concurrent insert race on (user_id, course_id)
            db.rollback()
            raise ConflictError("Already enrolled in this course.")

        logger.info(f"User {user_id} enrolled in course {course_id}")
        return enrollment

    def list_for_user(self, db: Session, *, user_id: int) -> List[Enrollment]:
        return crud_enrollment.get_by_user(db, user_id=user_id)


enrollment_service = EnrollmentService()
