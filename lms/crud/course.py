from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from lms.crud.base import CRUDBase
from lms.models.course import Course
from lms.schemas.course import CourseCreate, CourseUpdate


class CRUDCourse(CRUDBase[Course, CourseCreate, CourseUpdate]):

    def _query_with_lessons(self, db: Session):
        return db.query(Course).options(selectinload(Course.lessons))

    def get_with_lessons(self, db: Session, id: int) -> Optional[Course]:
        return self._query_with_lessons(db).filter(Course.id == id).first()

    def get_published(self, db: Session, skip: int = 0, limit: int = 100) -> List[Course]:
        return (
            self._query_with_lessons(db)
            .filter(Course.is_published.is_(True))
            .order_by(Course.order_index, Course.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_all_ordered(self, db: Session) -> List[Course]:
        return self._query_with_lessons(db).order_by(Course.order_index, Course.id).all()

    def get_prerequisite_id(self, db: Session, course_id: int) -> Optional[int]:
        row = db.query(Course.prerequisite_course_id).filter(Course.id == course_id).first()
        return row[0] if row else None


course = CRUDCourse(Course)
