from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from lms.core.constants import LessonStatusEnum, DeadlineStatusEnum


class AccessCheck(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    blocking_course_id: Optional[int] = None


class CourseAccess(BaseModel):
    can_access: bool
    reason: Optional[str] = None
    blocking_course_id: Optional[int] = None


class CourseLessonProgress(BaseModel):
    lesson_id: int
    lesson_title: str
    lesson_type: str
    order_index: int
    status: LessonStatusEnum = LessonStatusEnum.NOT_STARTED
    progress_percent: int = 0
    quiz_score: Optional[int] = None
    quiz_attempts: int = 0
    completed_at: Optional[datetime] = None


class CourseProgressDetail(BaseModel):
    course_id: int
    course_progress: int
    lessons: List[CourseLessonProgress] = Field(default_factory=list)


class CurrentCourse(BaseModel):
    id: int
    title: str
    thumbnail_url: Optional[str] = None
    enrolled_at: datetime
    completed_lessons: int
    total_lessons: int
    progress: int


class DashboardStats(BaseModel):
    enrolled_courses: int
    completed_courses: int
    lessons_completed: int
    average_quiz_score: int
    current_courses: List[CurrentCourse] = Field(default_factory=list)


class DeadlineEntry(BaseModel):
    enrollment_id: int
    course_id: int
    title: str
    is_mandatory: bool = False
    deadline: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    enrolled_at: datetime
    status: DeadlineStatusEnum
    days_remaining: Optional[int] = None
