from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import DEFAULT_ACTIVITY_LIMIT, RoleEnum
from lms.models.user import User
from lms.schemas.course import Course, CourseCreate, CourseDeadlineUpdate, CourseWithStats
from lms.schemas.enrollment import Enrollment, EnrollmentDeadlineUpdate
from lms.schemas.lesson import Lesson, LessonCreate, LessonPassingScoreUpdate
from lms.schemas.report import (
    AdminDashboardStats,
    ContentStat,
    MinistryCourseStats,
    MinistryStats,
    OverdueLearner,
    ProjectionRefreshResult,
    RecentActivity,
)
from lms.schemas.response import APIResponse
from lms.services.admin import admin_service
from lms.services.course import course_service
from lms.services.ministry import ministry_service
from lms.services.report import report_service
from lms.utils import deps

router = APIRouter()

require_admin = deps.require_role(RoleEnum.ADMIN)


@router.get("/stats", response_model=APIResponse[AdminDashboardStats])
async def get_dashboard_stats(
    *,
    db: Session = Depends(deps.get_db),
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    stats = report_service.get_dashboard_stats(db, capabilities=capabilities)
    return APIResponse(message="Dashboard stats retrieved successfully", data=stats)


@router.get("/content-stats", response_model=APIResponse[List[ContentStat]])
async def get_content_stats(
    *,
    db: Session = Depends(deps.get_db),
    admin: User = Depends(require_admin)
):
    stats = report_service.get_content_stats(db)
    return APIResponse(message="Content stats retrieved successfully", data=stats)


@router.get("/activity", response_model=APIResponse[List[RecentActivity]])
async def get_recent_activity(
    *,
    db: Session = Depends(deps.get_db),
    limit: int = DEFAULT_ACTIVITY_LIMIT,
    admin: User = Depends(require_admin)
):
    activity = report_service.get_recent_activity(db, limit=limit)
    return APIResponse(message="Recent activity retrieved successfully", data=activity)


@router.get("/ministry-stats", response_model=APIResponse[List[MinistryStats]])
async def get_ministry_stats(
    *,
    db: Session = Depends(deps.get_db),
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    stats = ministry_service.get_ministry_stats(db, capabilities=capabilities)
    return APIResponse(message="Ministry stats retrieved successfully", data=stats)


@router.get("/ministry-course-stats", response_model=APIResponse[List[MinistryCourseStats]])
async def get_ministry_course_stats(
    *,
    db: Session = Depends(deps.get_db),
    ministry: Optional[str] = None,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    stats = ministry_service.get_ministry_course_stats(db, capabilities=capabilities, ministry=ministry)
    return APIResponse(message="Ministry course stats retrieved successfully", data=stats)


@router.post("/ministry-course-stats/refresh", response_model=APIResponse[ProjectionRefreshResult])
async def refresh_ministry_course_stats(
    *,
    db: Session = Depends(deps.get_transactional_db),
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    result = ministry_service.refresh_ministry_course_stats(db, capabilities=capabilities)
    return APIResponse(message="Ministry course stats refreshed", data=result)


@router.get("/overdue", response_model=APIResponse[List[OverdueLearner]])
async def get_overdue_learners(
    *,
    db: Session = Depends(deps.get_db),
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    learners = report_service.get_overdue_learners(db, capabilities=capabilities)
    return APIResponse(message="Overdue learners retrieved successfully", data=learners)


@router.get("/courses", response_model=APIResponse[List[CourseWithStats]])
async def get_courses_with_stats(
    *,
    db: Session = Depends(deps.get_db),
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    courses = report_service.get_courses_with_stats(db, capabilities=capabilities)
    return APIResponse(message="Courses retrieved successfully", data=courses)


@router.post("/courses", response_model=APIResponse[Course], status_code=status.HTTP_201_CREATED)
async def create_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_in: CourseCreate,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    course = course_service.create_course(db, course_in=course_in, capabilities=capabilities)
    return APIResponse(message="Course created successfully", data=course)


@router.post("/courses/{course_id}/lessons", response_model=APIResponse[Lesson], status_code=status.HTTP_201_CREATED)
async def create_lesson(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    lesson_in: LessonCreate,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    lesson = course_service.create_lesson(db, course_id=course_id, lesson_in=lesson_in, capabilities=capabilities)
    return APIResponse(message="Lesson created successfully", data=lesson)


@router.put("/courses/{course_id}/deadline", response_model=APIResponse[Course])
async def set_course_deadline(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    update_in: CourseDeadlineUpdate,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    course = admin_service.set_course_deadline(db, course_id=course_id, update_in=update_in, capabilities=capabilities)
    return APIResponse(message="Course deadline updated successfully", data=course)


@router.put("/enrollments/{enrollment_id}/deadline", response_model=APIResponse[Enrollment])
async def set_enrollment_deadline(
    *,
    db: Session = Depends(deps.get_transactional_db),
    enrollment_id: int,
    update_in: EnrollmentDeadlineUpdate,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    enrollment = admin_service.set_enrollment_deadline(
        db, enrollment_id=enrollment_id, update_in=update_in, capabilities=capabilities
    )
    return APIResponse(message="Enrollment deadline updated", data=enrollment)


@router.put("/lessons/{lesson_id}/passing-score", response_model=APIResponse[Lesson])
async def set_lesson_passing_score(
    *,
    db: Session = Depends(deps.get_transactional_db),
    lesson_id: int,
    score_in: LessonPassingScoreUpdate,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    admin: User = Depends(require_admin)
):
    lesson = admin_service.set_lesson_passing_score(
        db, lesson_id=lesson_id, passing_score=score_in.passing_score, capabilities=capabilities
    )
    return APIResponse(message="Lesson passing score updated", data=lesson)
