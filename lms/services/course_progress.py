import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from lms.core.constants import DASHBOARD_CURRENT_COURSES_LIMIT, LessonStatusEnum
from lms.core.exceptions import NotFoundError
from lms.crud.course import course as crud_course
from lms.crud.enrollment import enrollment as crud_enrollment
from lms.crud.lesson import lesson as crud_lesson
from lms.crud.lesson_progress import lesson_progress as crud_lesson_progress
from lms.schemas.progress import CourseLessonProgress, CourseProgressDetail, CurrentCourse, DashboardStats
from lms.utils.numbers import percentage, rounded_mean

logger = logging.getLogger(__name__)


class CourseProgressService:

    def calculate(self, db: Session, *, user_id: int, course_id: int) -> int:
        """Percentage of the course's published lessons the user has completed."""
        lesson_ids = [lesson.id for lesson in crud_lesson.get_published_by_course(db, course_id=course_id)]
        if not lesson_ids:
            return 0
        completed = crud_lesson_progress.count_completed(db, user_id=user_id, lesson_ids=lesson_ids)
        return percentage(completed, len(lesson_ids))

    def sync_completion(self, db: Session, *, user_id: int, course_id: int, now: Optional[datetime] = None) -> int:
        """Recompute progress and mark the enrollment completed once it reaches 100."""
        progress = self.calculate(db, user_id=user_id, course_id=course_id)
        if progress >= 100:
            enrollment = crud_enrollment.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
            if enrollment and enrollment.completed_at is None:
                crud_enrollment.mark_completed(db, enrollment, completed_at=now or datetime.utcnow())
                logger.info(f"User {user_id} completed course {course_id}")
        return progress

    def get_detail(self, db: Session, *, user_id: int, course_id: int) -> CourseProgressDetail:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise NotFoundError("Course not found.")

        lessons = crud_lesson.get_published_by_course(db, course_id=course_id)
        records = {
            record.lesson_id: record
            for record in crud_lesson_progress.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
        }

        items = []
        for lesson in lessons:
            item = CourseLessonProgress(
                lesson_id=lesson.id,
                lesson_title=lesson.title,
                lesson_type=lesson.lesson_type.value,
                order_index=lesson.order_index,
            )
            record = records.get(lesson.id)
            if record:
                item.status = record.status
                item.progress_percent = record.progress_percent
                item.quiz_score = record.quiz_score
                item.quiz_attempts = record.quiz_attempts
                item.completed_at = record.completed_at
            items.append(item)

        completed = sum(1 for item in items if item.status == LessonStatusEnum.COMPLETED)
        return CourseProgressDetail(
            course_id=course_id,
            course_progress=percentage(completed, len(items)),
            lessons=items,
        )

    def get_dashboard(self, db: Session, *, user_id: int) -> DashboardStats:
        enrollments = crud_enrollment.get_by_user(db, user_id=user_id)
        records = crud_lesson_progress.get_by_user(db, user_id=user_id)

        completed_by_course = {}
        for record in records:
            if record.status == LessonStatusEnum.COMPLETED:
                completed_by_course.setdefault(record.course_id, set()).add(record.lesson_id)

        current = []
        for enrollment in enrollments:
            if enrollment.completed_at is not None or len(current) >= DASHBOARD_CURRENT_COURSES_LIMIT:
                continue
            published_ids = {lesson.id for lesson in enrollment.course.published_lessons}
            done = len(published_ids & completed_by_course.get(enrollment.course_id, set()))
            current.append(CurrentCourse(
                id=enrollment.course.id,
                title=enrollment.course.title,
                thumbnail_url=enrollment.course.thumbnail_url,
                enrolled_at=enrollment.enrolled_at,
                completed_lessons=done,
                total_lessons=len(published_ids),
                progress=percentage(done, len(published_ids)),
            ))

        return DashboardStats(
            enrolled_courses=len(enrollments),
            completed_courses=sum(1 for e in enrollments if e.completed_at is not None),
            lessons_completed=sum(1 for r in records if r.status == LessonStatusEnum.COMPLETED),
            average_quiz_score=rounded_mean(r.quiz_score for r in records),
            current_courses=current,
        )


course_progress_service = CourseProgressService()
