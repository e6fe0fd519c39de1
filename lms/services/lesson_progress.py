import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import LessonStatusEnum
from lms.core.exceptions import InvalidInputError, NotFoundError
from lms.crud.lesson import lesson as crud_lesson
from lms.crud.lesson_progress import lesson_progress as crud_lesson_progress
from lms.schemas.lesson_progress import (
    LessonCompletionResult,
    LessonProgress,
    LessonProgressResult,
    LessonRequirements,
)
from lms.services.course_progress import course_progress_service
from lms.services.quiz import effective_passing_score, evaluate_quiz

logger = logging.getLogger(__name__)


class LessonProgressService:

    def _get_lesson_or_raise(self, db: Session, lesson_id: int):
        lesson = crud_lesson.get(db, id=lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found.")
        return lesson

    def update_progress(
        self,
        db: Session,
        *,
        user_id: int,
        lesson_id: int,
        capabilities: SchemaCapabilities,
        status: Optional[LessonStatusEnum] = None,
        progress_percent: Optional[int] = None,
        quiz_score: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> LessonProgressResult:
        """Record partial progress. Completion only happens through complete_lesson."""
        lesson = self._get_lesson_or_raise(db, lesson_id)
        now = now or datetime.utcnow()

        if status == LessonStatusEnum.COMPLETED:
            raise InvalidInputError("Use the lesson completion endpoint to complete a lesson.")
        if progress_percent is not None and not 0 <= progress_percent <= 100:
            raise InvalidInputError("progress_percent must be between 0 and 100.")
        if quiz_score is not None and lesson.is_quiz:
            raise InvalidInputError("Quiz scores must be submitted through the lesson completion endpoint.")

        values = {"last_accessed": now}
        if status is not None:
            values["status"] = status
        if progress_percent is not None:
            values["progress_percent"] = progress_percent
        if quiz_score is not None:
            values["quiz_score"] = quiz_score

        progress = crud_lesson_progress.upsert(
            db,
            user_id=user_id,
            lesson_id=lesson_id,
            course_id=lesson.course_id,
            values=values,
            insert_defaults={"status": LessonStatusEnum.NOT_STARTED, "started_at": now},
            increment_attempts=quiz_score is not None,
            keep_completed=True,
        )

        course_progress = course_progress_service.sync_completion(
            db, user_id=user_id, course_id=lesson.course_id, now=now
        )
        return LessonProgressResult(
            progress=LessonProgress.build(progress, capabilities),
            course_progress=course_progress,
        )

    def complete_lesson(
        self,
        db: Session,
        *,
        user_id: int,
        lesson_id: int,
        capabilities: SchemaCapabilities,
        quiz_score: Optional[int] = None,
        total_questions: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> LessonCompletionResult:
        lesson = self._get_lesson_or_raise(db, lesson_id)
        now = now or datetime.utcnow()

        quiz_result = None
        stored_score = quiz_score
        if lesson.is_quiz:
            quiz_result = evaluate_quiz(quiz_score, total_questions, effective_passing_score(lesson, capabilities))
            stored_score = quiz_result.percentage

            if not quiz_result.passed:
                # a failed retake never demotes a lesson already completed
                values = {
                    "status": LessonStatusEnum.IN_PROGRESS,
                    "quiz_score": stored_score,
                    "last_accessed": now,
                }
                if capabilities.quiz_pass_flag:
                    values["passed"] = False
                progress = crud_lesson_progress.upsert(
                    db,
                    user_id=user_id,
                    lesson_id=lesson_id,
                    course_id=lesson.course_id,
                    values=values,
                    insert_defaults={"progress_percent": 0, "started_at": now},
                    increment_attempts=True,
                    keep_completed=True,
                )
                logger.info(
                    f"User {user_id} failed quiz lesson {lesson_id}: "
                    f"{quiz_result.percentage}% < {quiz_result.passing_score}%"
                )
                return LessonCompletionResult(
                    passed=False,
                    quiz_result=quiz_result,
                    course_progress=course_progress_service.calculate(
                        db, user_id=user_id, course_id=lesson.course_id
                    ),
                    progress=LessonProgress.build(progress, capabilities),
                )

        values = {
            "status": LessonStatusEnum.COMPLETED,
            "progress_percent": 100,
            "completed_at": now,
            "last_accessed": now,
        }
        if stored_score is not None:
            values["quiz_score"] = stored_score
        if capabilities.quiz_pass_flag:
            values["passed"] = True

        progress = crud_lesson_progress.upsert(
            db,
            user_id=user_id,
            lesson_id=lesson_id,
            course_id=lesson.course_id,
            values=values,
            insert_defaults={"started_at": now},
            increment_attempts=stored_score is not None,
        )
        course_progress = course_progress_service.sync_completion(
            db, user_id=user_id, course_id=lesson.course_id, now=now
        )
        return LessonCompletionResult(
            passed=True,
            quiz_result=quiz_result,
            course_progress=course_progress,
            progress=LessonProgress.build(progress, capabilities),
        )

    def get_requirements(
        self, db: Session, *, user_id: int, lesson_id: int, capabilities: SchemaCapabilities
    ) -> LessonRequirements:
        lesson = self._get_lesson_or_raise(db, lesson_id)
        requirements = LessonRequirements(
            lesson_id=lesson.id,
            title=lesson.title,
            lesson_type=lesson.lesson_type.value,
            passing_score=effective_passing_score(lesson, capabilities),
        )

        record = crud_lesson_progress.get_by_user_and_lesson(db, user_id=user_id, lesson_id=lesson_id)
        if record:
            built = LessonProgress.build(record, capabilities)
            requirements.current_score = record.quiz_score
            requirements.attempts = record.quiz_attempts
            requirements.passed = built.passed
            requirements.status = record.status
        return requirements


lesson_progress_service = LessonProgressService()
