from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.models.user import User
from lms.schemas.enrollment import Enrollment, EnrollmentCreated
from lms.schemas.lesson_progress import (
    LessonCompletionRequest,
    LessonCompletionResult,
    LessonProgressResult,
    LessonProgressUpdate,
    LessonRequirements,
)
from lms.schemas.progress import CourseAccess, CourseProgressDetail, DashboardStats, DeadlineEntry
from lms.schemas.response import APIResponse
from lms.services.course_progress import course_progress_service
from lms.services.deadline import deadline_service
from lms.services.enrollment import enrollment_service
from lms.services.lesson_progress import lesson_progress_service
from lms.services.prerequisite import prerequisite_service
from lms.utils import deps

router = APIRouter()


@router.get("/dashboard", response_model=APIResponse[DashboardStats])
async def get_dashboard(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    stats = course_progress_service.get_dashboard(db, user_id=current_user.id)
    return APIResponse(message="Dashboard stats retrieved successfully", data=stats)


@router.get("/deadlines", response_model=APIResponse[List[DeadlineEntry]])
async def get_deadlines(
    *,
    db: Session = Depends(deps.get_transactional_db),
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    current_user: User = Depends(deps.get_current_user)
):
    deadlines = deadline_service.get_deadlines(db, user_id=current_user.id, capabilities=capabilities)
    return APIResponse(message="Deadlines retrieved successfully", data=deadlines)


@router.post("/enroll/{course_id}", response_model=APIResponse[EnrollmentCreated], status_code=status.HTTP_201_CREATED)
async def enroll(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    current_user: User = Depends(deps.get_current_user)
):
    enrollment = enrollment_service.enroll(
        db, user_id=current_user.id, course_id=course_id, capabilities=capabilities
    )
    return APIResponse(message="Enrolled successfully", data=EnrollmentCreated(enrollment_id=enrollment.id))


@router.get("/access/{course_id}", response_model=APIResponse[CourseAccess])
async def check_access(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    current_user: User = Depends(deps.get_current_user)
):
    access = prerequisite_service.can_enroll(
        db, user_id=current_user.id, course_id=course_id, capabilities=capabilities
    )
    return APIResponse(
        message="Course access checked",
        data=CourseAccess(
            can_access=access.allowed,
            reason=access.reason,
            blocking_course_id=access.blocking_course_id,
        ),
    )


@router.get("/course/{course_id}", response_model=APIResponse[CourseProgressDetail])
async def get_course_progress(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    detail = course_progress_service.get_detail(db, user_id=current_user.id, course_id=course_id)
    return APIResponse(message="Course progress retrieved successfully", data=detail)


@router.get("/enrollments", response_model=APIResponse[List[Enrollment]])
async def list_enrollments(
    *,
    db: Session = Depends(deps.get_db),
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    current_user: User = Depends(deps.get_current_user)
):
    enrollments = enrollment_service.list_for_user(db, user_id=current_user.id)
    return APIResponse(
        message="Enrollments retrieved successfully",
        data=[Enrollment.build(e, capabilities) for e in enrollments],
    )


@router.get("/lesson/{lesson_id}/requirements", response_model=APIResponse[LessonRequirements])
async def get_lesson_requirements(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    current_user: User = Depends(deps.get_current_user)
):
    requirements = lesson_progress_service.get_requirements(
        db, user_id=current_user.id, lesson_id=lesson_id, capabilities=capabilities
    )
    return APIResponse(message="Lesson requirements retrieved successfully", data=requirements)


@router.put("/lesson/{lesson_id}", response_model=APIResponse[LessonProgressResult])
async def update_lesson_progress(
    *,
    db: Session = Depends(deps.get_transactional_db),
    lesson_id: int,
    progress_in: LessonProgressUpdate,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    current_user: User = Depends(deps.get_current_user)
):
    result = lesson_progress_service.update_progress(
        db,
        user_id=current_user.id,
        lesson_id=lesson_id,
        capabilities=capabilities,
        status=progress_in.status,
        progress_percent=progress_in.progress_percent,
        quiz_score=progress_in.quiz_score,
    )
    return APIResponse(message="Lesson progress updated", data=result)


@router.post("/lesson/{lesson_id}/complete", response_model=APIResponse[LessonCompletionResult])
async def complete_lesson(
    *,
    db: Session = Depends(deps.get_transactional_db),
    lesson_id: int,
    completion_in: LessonCompletionRequest,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    current_user: User = Depends(deps.get_current_user)
):
    result = lesson_progress_service.complete_lesson(
        db,
        user_id=current_user.id,
        lesson_id=lesson_id,
        capabilities=capabilities,
        quiz_score=completion_in.quiz_score,
        total_questions=completion_in.total_questions,
    )
    message = "Lesson completed" if result.passed else "Quiz not passed"
    return APIResponse(message=message, data=result)
