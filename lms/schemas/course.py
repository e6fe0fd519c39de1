from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import CourseLevelEnum
from lms.schemas.lesson import Lesson


class CourseBase(BaseModel):
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    level: CourseLevelEnum = CourseLevelEnum.BEGINNER
    order_index: int = 0
    is_published: bool = True


class CourseCreate(CourseBase):
    deadline: Optional[datetime] = None
    is_mandatory: bool = False
    prerequisite_course_id: Optional[int] = None


class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    level: Optional[CourseLevelEnum] = None
    is_published: Optional[bool] = None


class CourseDeadlineUpdate(BaseModel):
    """Fields left out of the payload are not touched; an explicit null clears the value."""
    deadline: Optional[datetime] = None
    is_mandatory: Optional[bool] = None
    prerequisite_course_id: Optional[int] = None


class Course(CourseBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deadline: Optional[datetime] = None
    is_mandatory: bool = False
    prerequisite_course_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def build(cls, course, capabilities: SchemaCapabilities, **extra):
        data = {
            "id": course.id,
            "title": course.title,
            "description": course.description,
            "thumbnail_url": course.thumbnail_url,
            "level": course.level,
            "order_index": course.order_index,
            "is_published": course.is_published,
            "created_at": course.created_at,
        }
        if capabilities.deadlines:
            data["deadline"] = course.deadline
            data["is_mandatory"] = course.is_mandatory
        if capabilities.prerequisites:
            data["prerequisite_course_id"] = course.prerequisite_course_id
        data.update(extra)
        return cls(**data)


class CourseDetail(Course):
    lessons: List[Lesson] = Field(default_factory=list)


class CourseWithStats(Course):
    enrolled_count: int
    completed_count: int
    overdue_count: int
    lesson_count: int
