import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import FeatureEnum
from lms.core.exceptions import NotFoundError
from lms.crud.course import course as crud_course
from lms.crud.enrollment import enrollment as crud_enrollment
from lms.crud.lesson import lesson as crud_lesson
from lms.schemas.course import Course, CourseDeadlineUpdate
from lms.schemas.enrollment import Enrollment, EnrollmentDeadlineUpdate
from lms.schemas.lesson import Lesson
from lms.services.deadline import is_overdue
from lms.services.prerequisite import prerequisite_service
from lms.services.quiz import validate_passing_score
from lms.utils.dates import to_naive_utc

logger = logging.getLogger(__name__)


class AdminService:

    def set_course_deadline(
        self,
        db: Session,
        *,
        course_id: int,
        update_in: CourseDeadlineUpdate,
        capabilities: SchemaCapabilities,
    ) -> Course:
        """Apply the deadline, mandatory flag and prerequisite fields present in ``update_in``.

        Fields missing from the request are left alone; an explicit null clears
        the deadline or prerequisite. A new deadline is copied onto incomplete
        enrollments that do not carry their own.
        """
        fields = update_in.model_fields_set
        if fields & {"deadline", "is_mandatory"}:
            capabilities.require(FeatureEnum.DEADLINES)
        if "prerequisite_course_id" in fields:
            capabilities.require(FeatureEnum.PREREQUISITES)

        course = crud_course.get(db, id=course_id)
        if not course:
            raise NotFoundError("Course not found.")

        values = {}
        if "deadline" in fields:
            values["deadline"] = to_naive_utc(update_in.deadline)
        if "is_mandatory" in fields and update_in.is_mandatory is not None:
            values["is_mandatory"] = update_in.is_mandatory
        if "prerequisite_course_id" in fields:
            prerequisite_service.validate_prerequisite(
                db, course_id=course_id, prerequisite_course_id=update_in.prerequisite_course_id
            )
            values["prerequisite_course_id"] = update_in.prerequisite_course_id

        crud_course.update(db, db_obj=course, obj_in=values, commit=False)

        if values.get("deadline") is not None:
            enrollments = crud_enrollment.get_incomplete_without_deadline(db, course_id=course_id)
            for enrollment in enrollments:
                enrollment.deadline = values["deadline"]
            db.flush()
            logger.info(f"Copied deadline of course {course_id} onto {len(enrollments)} enrollment(s)")

        return Course.build(course, capabilities)

    def set_enrollment_deadline(
        self,
        db: Session,
        *,
        enrollment_id: int,
        update_in: EnrollmentDeadlineUpdate,
        capabilities: SchemaCapabilities,
        now: Optional[datetime] = None,
    ) -> Enrollment:
        capabilities.require(FeatureEnum.DEADLINES, "Direct enrollment deadlines are not supported by the current database schema.")

        enrollment = crud_enrollment.get(db, id=enrollment_id)
        if not enrollment:
            raise NotFoundError("Enrollment not found.")

        enrollment.deadline = to_naive_utc(update_in.deadline)
        enrollment.is_overdue = is_overdue(enrollment, capabilities, now or datetime.utcnow())
        db.flush()
        return Enrollment.build(enrollment, capabilities)

    def set_lesson_passing_score(
        self,
        db: Session,
        *,
        lesson_id: int,
        passing_score: int,
        capabilities: SchemaCapabilities,
    ) -> Lesson:
        validate_passing_score(passing_score)
        capabilities.require(FeatureEnum.PASSING_SCORES, "Custom passing scores are not supported by the current database schema.")

        lesson = crud_lesson.get(db, id=lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found.")

        crud_lesson.update(db, db_obj=lesson, obj_in={"passing_score": passing_score}, commit=False)
        return Lesson.build(lesson, capabilities)


admin_service = AdminService()
