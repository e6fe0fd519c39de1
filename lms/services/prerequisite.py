import logging
from typing import Optional
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import CourseLevelEnum
from lms.core.exceptions import InvalidInputError, NotFoundError
from lms.crud.course import course as crud_course
from lms.crud.enrollment import enrollment as crud_enrollment
from lms.models.course import Course
from lms.schemas.progress import AccessCheck

logger = logging.getLogger(__name__)

# Level gates: a course at the key level needs a completed course at the value level
LEVEL_REQUIREMENTS = {
    CourseLevelEnum.INTERMEDIATE: CourseLevelEnum.BEGINNER,
    CourseLevelEnum.ADVANCED: CourseLevelEnum.INTERMEDIATE,
}


class PrerequisiteService:

    def can_enroll(self, db: Session, *, user_id: int, course_id: int, capabilities: SchemaCapabilities) -> AccessCheck:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise NotFoundError("Course not found.")
        return self.check_course(db, user_id=user_id, course=course, capabilities=capabilities)

    def check_course(self, db: Session, *, user_id: int, course: Course, capabilities: SchemaCapabilities) -> AccessCheck:
        if capabilities.prerequisites and course.prerequisite_course_id is not None:
            prerequisite_id = course.prerequisite_course_id
            if not crud_enrollment.has_completed_course(db, user_id=user_id, course_id=prerequisite_id):
                prerequisite = crud_course.get(db, id=prerequisite_id)
                title = prerequisite.title if prerequisite else f"course {prerequisite_id}"
                return AccessCheck(
                    allowed=False,
                    reason=f'You must complete "{title}" first',
                    blocking_course_id=prerequisite_id,
                )

        required_level = LEVEL_REQUIREMENTS.get(course.level)
        if required_level and not crud_enrollment.has_completed_level(db, user_id=user_id, level=required_level):
            return AccessCheck(
                allowed=False,
                reason=f"Complete {_article(required_level.value)} {required_level.value} course first "
                       f"to unlock {course.level.value} courses",
            )

        return AccessCheck(allowed=True)

    def validate_prerequisite(self, db: Session, *, course_id: int, prerequisite_course_id: Optional[int]):
        """Reject a prerequisite link that is missing, self-referencing or closes a cycle."""
        if prerequisite_course_id is None:
            return
        if prerequisite_course_id == course_id:
            raise InvalidInputError("A course cannot be its own prerequisite.")
        if not crud_course.get(db, id=prerequisite_course_id):
            raise InvalidInputError("Prerequisite course not found.")

        seen = {course_id}
        current = prerequisite_course_id
        while current is not None:
            if current in seen:
                logger.warning(f"Rejected prerequisite {prerequisite_course_id} for course {course_id}: cycle")
                raise InvalidInputError("Prerequisite would create a cycle.")
            seen.add(current)
            current = crud_course.get_prerequisite_id(db, course_id=current)


def _article(word: str) -> str:
    return "an" if word[:1].lower() in "aeiou" else "a"


prerequisite_service = PrerequisiteService()
