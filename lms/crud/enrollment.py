from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session, selectinload

from lms.crud.base import CRUDBase
from lms.core.constants import CourseLevelEnum
from lms.models.course import Course
from lms.models.enrollment import Enrollment


class CRUDEnrollment(CRUDBase[Enrollment, BaseModel, BaseModel]):

    def _query_with_course(self, db: Session):
        return db.query(Enrollment).options(selectinload(Enrollment.course))

    def get_by_user_and_course(self, db: Session, user_id: int, course_id: int) -> Optional[Enrollment]:
        return (
            db.query(Enrollment)
            .filter(Enrollment.user_id == user_id)
            .filter(Enrollment.course_id == course_id)
            .first()
        )

    def get_by_user(self, db: Session, user_id: int) -> List[Enrollment]:
        return (
            self._query_with_course(db)
            .filter(Enrollment.user_id == user_id)
            .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
            .all()
        )

    def get_all_with_course(self, db: Session) -> List[Enrollment]:
        return (
            self._query_with_course(db)
            .options(selectinload(Enrollment.user))
            .order_by(Enrollment.id)
            .all()
        )

    def get_incomplete_without_deadline(self, db: Session, course_id: int) -> List[Enrollment]:
        return (
            db.query(Enrollment)
            .filter(Enrollment.course_id == course_id)
            .filter(Enrollment.completed_at.is_(None))
            .filter(Enrollment.deadline.is_(None))
            .all()
        )

    def has_completed_course(self, db: Session, user_id: int, course_id: int) -> bool:
        return (
            db.query(Enrollment.id)
            .filter(Enrollment.user_id == user_id)
            .filter(Enrollment.course_id == course_id)
            .filter(Enrollment.completed_at.isnot(None))
            .first()
        ) is not None

    def has_completed_level(self, db: Session, user_id: int, level: CourseLevelEnum) -> bool:
        return (
            db.query(Enrollment.id)
            .join(Course, Course.id == Enrollment.course_id)
            .filter(Enrollment.user_id == user_id)
            .filter(Course.level == level)
            .filter(Enrollment.completed_at.isnot(None))
            .first()
        ) is not None

    def mark_completed(self, db: Session, enrollment: Enrollment, completed_at: datetime) -> Enrollment:
        if enrollment.completed_at is None:
            enrollment.completed_at = completed_at
            db.add(enrollment)
            db.flush()
        return enrollment


enrollment = CRUDEnrollment(Enrollment)
