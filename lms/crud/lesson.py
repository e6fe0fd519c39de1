from typing import List
from pydantic import BaseModel
from sqlalchemy.orm import Session

from lms.crud.base import CRUDBase
from lms.models.lesson import Lesson
from lms.schemas.lesson import LessonCreate


class CRUDLesson(CRUDBase[Lesson, LessonCreate, BaseModel]):

    def get_published_by_course(self, db: Session, course_id: int) -> List[Lesson]:
        return (
            db.query(Lesson)
            .filter(Lesson.course_id == course_id)
            .filter(Lesson.is_published.is_(True))
            .order_by(Lesson.order_index, Lesson.id)
            .all()
        )


lesson = CRUDLesson(Lesson)
