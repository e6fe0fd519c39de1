from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import LessonTypeEnum, DEFAULT_PASSING_SCORE


class LessonBase(BaseModel):
    title: str
    description: Optional[str] = None
    lesson_type: LessonTypeEnum = LessonTypeEnum.CONTENT
    content: Optional[str] = None
    duration: int = 0
    order_index: int = 0
    is_published: bool = True


class LessonCreate(LessonBase):
    passing_score: Optional[int] = None


class LessonPassingScoreUpdate(BaseModel):
    passing_score: int


class Lesson(LessonBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    passing_score: int = DEFAULT_PASSING_SCORE
    created_at: Optional[datetime] = None

    @classmethod
    def build(cls, lesson, capabilities: SchemaCapabilities):
        passing_score = DEFAULT_PASSING_SCORE
        if capabilities.passing_scores and lesson.passing_score is not None:
            passing_score = lesson.passing_score
        return cls(
            id=lesson.id,
            course_id=lesson.course_id,
            title=lesson.title,
            description=lesson.description,
            lesson_type=lesson.lesson_type,
            content=lesson.content,
            duration=lesson.duration,
            order_index=lesson.order_index,
            is_published=lesson.is_published,
            passing_score=passing_score,
            created_at=lesson.created_at,
        )
