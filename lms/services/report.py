import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import (
    DEFAULT_ACTIVITY_LIMIT,
    DEFAULT_PASSING_SCORE,
    MAX_ACTIVITY_LIMIT,
    LessonStatusEnum,
)
from lms.crud.course import course as crud_course
from lms.crud.enrollment import enrollment as crud_enrollment
from lms.crud.lesson import lesson as crud_lesson
from lms.crud.lesson_progress import lesson_progress as crud_lesson_progress
from lms.crud.user import user as crud_user
from lms.schemas.course import Course, CourseWithStats
from lms.schemas.report import AdminDashboardStats, ContentStat, OverdueLearner, RecentActivity
from lms.services.deadline import effective_deadline, is_overdue
from lms.utils.numbers import percentage, rounded_mean

logger = logging.getLogger(__name__)


class ReportService:

    def get_dashboard_stats(
        self, db: Session, *, capabilities: SchemaCapabilities, now: Optional[datetime] = None
    ) -> AdminDashboardStats:
        now = now or datetime.utcnow()
        enrollments = crud_enrollment.get_all_with_course(db)
        records = crud_lesson_progress.get_all(db)
        lessons = {lesson.id: lesson for lesson in crud_lesson.get_multi(db, limit=None)}

        completed_minutes = sum(
            lessons[r.lesson_id].duration or 0
            for r in records
            if r.status == LessonStatusEnum.COMPLETED and r.lesson_id in lessons
        )
        scored = [r for r in records if r.quiz_score is not None]
        if capabilities.quiz_pass_flag:
            passed = sum(1 for r in scored if r.passed)
        else:
            passed = sum(1 for r in scored if r.quiz_score >= DEFAULT_PASSING_SCORE)

        return AdminDashboardStats(
            total_learners=crud_user.count_learners(db),
            total_courses=crud_course.count(db),
            total_lessons=len(lessons),
            total_enrollments=len(enrollments),
            completion_rate=percentage(sum(1 for e in enrollments if e.completed_at is not None), len(enrollments)),
            total_study_hours=completed_minutes // 60,
            overdue_enrollments=sum(1 for e in enrollments if is_overdue(e, capabilities, now)),
            average_quiz_score=rounded_mean(r.quiz_score for r in scored),
            quiz_pass_rate=percentage(passed, len(scored)),
        )

    def get_overdue_learners(
        self, db: Session, *, capabilities: SchemaCapabilities, now: Optional[datetime] = None
    ) -> List[OverdueLearner]:
        if not capabilities.deadlines:
            return []
        now = now or datetime.utcnow()

        overdue = []
        for enrollment in crud_enrollment.get_all_with_course(db):
            if not is_overdue(enrollment, capabilities, now):
                continue
            deadline = effective_deadline(enrollment, capabilities)
            overdue.append(OverdueLearner(
                enrollment_id=enrollment.id,
                user_id=enrollment.user_id,
                full_name=enrollment.user.full_name,
                email=enrollment.user.email,
                ministry=enrollment.user.ministry,
                course_id=enrollment.course_id,
                course_title=enrollment.course.title,
                deadline=deadline,
                days_overdue=int((now - deadline).total_seconds() / 86400),
            ))
        overdue.sort(key=lambda o: (o.deadline, o.enrollment_id))
        return overdue

    def get_courses_with_stats(
        self, db: Session, *, capabilities: SchemaCapabilities, now: Optional[datetime] = None
    ) -> List[CourseWithStats]:
        now = now or datetime.utcnow()
        by_course = {}
        for enrollment in crud_enrollment.get_all_with_course(db):
            by_course.setdefault(enrollment.course_id, []).append(enrollment)

        result = []
        for course in crud_course.get_all_ordered(db):
            enrollments = by_course.get(course.id, [])
            result.append(CourseWithStats(
                **Course.build(course, capabilities).model_dump(),
                enrolled_count=len({e.user_id for e in enrollments}),
                completed_count=sum(1 for e in enrollments if e.completed_at is not None),
                overdue_count=sum(1 for e in enrollments if is_overdue(e, capabilities, now)),
                lesson_count=len(course.lessons),
            ))
        return result

    def get_recent_activity(self, db: Session, *, limit: int = DEFAULT_ACTIVITY_LIMIT) -> List[RecentActivity]:
        limit = min(MAX_ACTIVITY_LIMIT, max(1, limit))
        rows = crud_lesson_progress.get_recent_activity(db, limit=limit)
        return [RecentActivity(**row._asdict()) for row in rows]

    def get_content_stats(self, db: Session) -> List[ContentStat]:
        """Lesson count per lesson type with its share of all lessons."""
        counts = {}
        for lesson in crud_lesson.get_multi(db, limit=None):
            counts[lesson.lesson_type] = counts.get(lesson.lesson_type, 0) + 1
        total = sum(counts.values())
        return [
            ContentStat(
                lesson_type=lesson_type.value,
                count=count,
                share=percentage(count, total),
            )
            for lesson_type, count in sorted(counts.items(), key=lambda item: (-item[1], item[0].value))
        ]


report_service = ReportService()
