from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from lms.core.constants import LessonStatusEnum


class MinistryStats(BaseModel):
    name: str
    total_learners: int
    active_learners: int
    courses_completed: int
    overdue_count: int
    avg_quiz_score: int


class MinistryCourseStats(BaseModel):
    ministry: str
    course_id: int
    course_title: str
    enrolled_count: int
    completed_count: int
    overdue_count: int
    avg_score: int
    completion_rate: int


class AdminDashboardStats(BaseModel):
    total_learners: int
    total_courses: int
    total_lessons: int
    total_enrollments: int
    completion_rate: int
    total_study_hours: int
    overdue_enrollments: int
    average_quiz_score: int
    quiz_pass_rate: int


class OverdueLearner(BaseModel):
    enrollment_id: int
    user_id: int
    full_name: Optional[str] = None
    email: str
    ministry: Optional[str] = None
    course_id: int
    course_title: str
    deadline: datetime
    days_overdue: int


class ProjectionRefreshResult(BaseModel):
    rows_written: int
    refreshed_at: datetime


class ContentStat(BaseModel):
    lesson_type: str
    count: int
    share: int


class RecentActivity(BaseModel):
    id: int
    user_id: int
    user_name: Optional[str] = None
    ministry: Optional[str] = None
    lesson_id: int
    lesson_title: str
    course_id: int
    course_title: str
    status: LessonStatusEnum
    last_accessed: datetime
