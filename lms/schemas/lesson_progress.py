from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import LessonStatusEnum


class LessonProgressUpdate(BaseModel):
    status: Optional[LessonStatusEnum] = None
    progress_percent: Optional[int] = Field(None, ge=0, le=100)
    quiz_score: Optional[int] = Field(None, ge=0)


class LessonCompletionRequest(BaseModel):
    quiz_score: Optional[int] = Field(None, ge=0)
    total_questions: Optional[int] = Field(None, ge=0)


class LessonProgress(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    lesson_id: int
    course_id: int
    status: LessonStatusEnum
    progress_percent: int
    quiz_score: Optional[int] = None
    quiz_attempts: int
    passed: bool = False
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    last_accessed: Optional[datetime] = None

    @classmethod
    def build(cls, progress, capabilities: SchemaCapabilities):
        passed = bool(progress.passed) if capabilities.quiz_pass_flag else progress.status == LessonStatusEnum.COMPLETED
        return cls(
            id=progress.id,
            user_id=progress.user_id,
            lesson_id=progress.lesson_id,
            course_id=progress.course_id,
            status=progress.status,
            progress_percent=progress.progress_percent,
            quiz_score=progress.quiz_score,
            quiz_attempts=progress.quiz_attempts,
            passed=passed,
            started_at=progress.started_at,
            completed_at=progress.completed_at,
            last_accessed=progress.last_accessed,
        )


class QuizResult(BaseModel):
    passed: bool
    percentage: int
    passing_score: int


class LessonProgressResult(BaseModel):
    progress: LessonProgress
    course_progress: int


class LessonCompletionResult(BaseModel):
    passed: bool
    quiz_result: Optional[QuizResult] = None
    course_progress: int
    progress: LessonProgress


class LessonRequirements(BaseModel):
    lesson_id: int
    title: str
    lesson_type: str
    passing_score: int
    current_score: Optional[int] = None
    attempts: int = 0
    passed: bool = False
    status: LessonStatusEnum = LessonStatusEnum.NOT_STARTED
