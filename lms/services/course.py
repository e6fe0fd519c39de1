import logging
from typing import List
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import FeatureEnum
from lms.core.exceptions import InvalidInputError, NotFoundError
from lms.crud.course import course as crud_course
from lms.crud.lesson import lesson as crud_lesson
from lms.schemas.course import Course, CourseCreate, CourseDetail
from lms.schemas.lesson import Lesson, LessonCreate
from lms.services.quiz import validate_passing_score
from lms.utils.dates import to_naive_utc

logger = logging.getLogger(__name__)


class CourseService:

    def _detail(self, course, capabilities: SchemaCapabilities) -> CourseDetail:
        return CourseDetail.build(
            course,
            capabilities,
            lessons=[Lesson.build(lesson, capabilities) for lesson in course.published_lessons],
        )

    def list_published(self, db: Session, *, capabilities: SchemaCapabilities, skip: int = 0, limit: int = 100) -> List[CourseDetail]:
        return [
            self._detail(course, capabilities)
            for course in crud_course.get_published(db, skip=skip, limit=limit)
        ]

    def get_course(self, db: Session, *, course_id: int, capabilities: SchemaCapabilities) -> CourseDetail:
        course = crud_course.get_with_lessons(db, id=course_id)
        if not course:
            raise NotFoundError("Course not found.")
        return self._detail(course, capabilities)

    def create_course(self, db: Session, *, course_in: CourseCreate, capabilities: SchemaCapabilities) -> Course:
        values = course_in.model_dump(exclude={"deadline", "is_mandatory", "prerequisite_course_id"})
        fields = course_in.model_fields_set

        if fields & {"deadline", "is_mandatory"}:
            capabilities.require(FeatureEnum.DEADLINES)
            values["deadline"] = to_naive_utc(course_in.deadline)
            values["is_mandatory"] = course_in.is_mandatory
        if course_in.prerequisite_course_id is not None:
            capabilities.require(FeatureEnum.PREREQUISITES)
            if not crud_course.get(db, id=course_in.prerequisite_course_id):
                raise InvalidInputError("Prerequisite course not found.")
            values["prerequisite_course_id"] = course_in.prerequisite_course_id

        course = crud_course.create(db, obj_in=values, commit=False)
        logger.info(f"Created course {course.id} ({course.title})")
        return Course.build(course, capabilities)

    def create_lesson(
        self, db: Session, *, course_id: int, lesson_in: LessonCreate, capabilities: SchemaCapabilities
    ) -> Lesson:
        if not crud_course.get(db, id=course_id):
            raise NotFoundError("Course not found.")

        values = lesson_in.model_dump(exclude={"passing_score"})
        values["course_id"] = course_id
        if lesson_in.passing_score is not None:
            capabilities.require(FeatureEnum.PASSING_SCORES)
            validate_passing_score(lesson_in.passing_score)
            values["passing_score"] = lesson_in.passing_score

        lesson = crud_lesson.create(db, obj_in=values, commit=False)
        logger.info(f"Created lesson {lesson.id} in course {course_id}")
        return Lesson.build(lesson, capabilities)


course_service = CourseService()
