from typing import Any, Dict, List, Optional
from pydantic import BaseModel
from sqlalchemy import case, func, literal
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from lms.crud.base import CRUDBase
from lms.core.constants import LessonStatusEnum
from lms.core.exceptions import UnsupportedFeatureError
from lms.models.course import Course
from lms.models.lesson import Lesson
from lms.models.lesson_progress import LessonProgress
from lms.models.user import User

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}
_STATUS_TYPE = LessonProgress.__table__.c.status.type


class CRUDLessonProgress(CRUDBase[LessonProgress, BaseModel, BaseModel]):

    def get_by_user_and_lesson(self, db: Session, user_id: int, lesson_id: int) -> Optional[LessonProgress]:
        return (
            db.query(LessonProgress)
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.lesson_id == lesson_id)
            .first()
        )

    def get_by_user_and_course(self, db: Session, user_id: int, course_id: int) -> List[LessonProgress]:
        return (
            db.query(LessonProgress)
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.course_id == course_id)
            .all()
        )

    def get_by_user(self, db: Session, user_id: int) -> List[LessonProgress]:
        return db.query(LessonProgress).filter(LessonProgress.user_id == user_id).all()

    def get_all(self, db: Session) -> List[LessonProgress]:
        return db.query(LessonProgress).order_by(LessonProgress.id).all()

    def upsert(
        self,
        db: Session,
        *,
        user_id: int,
        lesson_id: int,
        course_id: int,
        values: Dict[str, Any],
        insert_defaults: Optional[Dict[str, Any]] = None,
        increment_attempts: bool = False,
        keep_completed: bool = False,
    ) -> LessonProgress:
        """Insert or update the (user, lesson) row in one statement.

        ``values`` lists the fields written on both insert and update; any
        column not named keeps its stored value on conflict. ``insert_defaults``
        apply only when the row is created. With ``keep_completed`` a row that
        is already COMPLETED keeps its status and progress_percent.
        """
        dialect = db.get_bind().dialect.name
        if dialect not in _UPSERT_DIALECTS:
            raise UnsupportedFeatureError(
                "lesson_progress_upsert",
                f"Lesson progress upsert is not available for the {dialect} dialect.",
            )
        insert = _UPSERT_DIALECTS[dialect]

        row = {"user_id": user_id, "lesson_id": lesson_id, "course_id": course_id}
        row.update(insert_defaults or {})
        row.update(values)
        row["quiz_attempts"] = 1 if increment_attempts else row.get("quiz_attempts", 0)

        set_ = dict(values)
        if keep_completed:
            is_completed = LessonProgress.status == literal(LessonStatusEnum.COMPLETED, _STATUS_TYPE)
            if "status" in set_:
                set_["status"] = case(
                    (is_completed, LessonProgress.status),
                    else_=literal(set_["status"], _STATUS_TYPE),
                )
            if "progress_percent" in set_:
                set_["progress_percent"] = case(
                    (is_completed, LessonProgress.progress_percent),
                    else_=literal(set_["progress_percent"]),
                )
        if increment_attempts:
            set_["quiz_attempts"] = LessonProgress.quiz_attempts + 1

        stmt = insert(LessonProgress).values(**row)
        if set_:
            stmt = stmt.on_conflict_do_update(index_elements=["user_id", "lesson_id"], set_=set_)
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=["user_id", "lesson_id"])
        db.flush()
        db.execute(stmt)

        progress = (
            db.query(LessonProgress)
            .populate_existing()
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.lesson_id == lesson_id)
            .one()
        )
        # pass flag is deferred; reload it on next access
        db.expire(progress, ["passed"])
        return progress

    def count_completed(self, db: Session, user_id: int, lesson_ids: List[int]) -> int:
        if not lesson_ids:
            return 0
        return (
            db.query(func.count(LessonProgress.id))
            .filter(LessonProgress.user_id == user_id)
            .filter(LessonProgress.lesson_id.in_(lesson_ids))
            .filter(LessonProgress.status == LessonStatusEnum.COMPLETED)
            .scalar()
        )

    def get_recent_activity(self, db: Session, limit: int) -> list:
        """Latest touched progress rows joined to learner, lesson and course, newest first."""
        return (
            db.query(
                LessonProgress.id,
                LessonProgress.user_id,
                User.full_name.label("user_name"),
                User.ministry,
                LessonProgress.lesson_id,
                Lesson.title.label("lesson_title"),
                LessonProgress.course_id,
                Course.title.label("course_title"),
                LessonProgress.status,
                LessonProgress.last_accessed,
            )
            .join(User, User.id == LessonProgress.user_id)
            .join(Lesson, Lesson.id == LessonProgress.lesson_id)
            .join(Course, Course.id == LessonProgress.course_id)
            .filter(LessonProgress.last_accessed.isnot(None))
            .order_by(LessonProgress.last_accessed.desc(), LessonProgress.id.desc())
            .limit(limit)
            .all()
        )


lesson_progress = CRUDLessonProgress(LessonProgress)
