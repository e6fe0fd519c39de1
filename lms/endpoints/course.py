from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lms.core.capabilities import SchemaCapabilities
from lms.models.user import User
from lms.schemas.course import CourseDetail
from lms.schemas.response import APIResponse
from lms.services.course import course_service
from lms.utils import deps

router = APIRouter()


@router.get("/", response_model=APIResponse[List[CourseDetail]])
async def list_courses(
    *,
    db: Session = Depends(deps.get_db),
    skip: int = 0,
    limit: int = 100,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    current_user: User = Depends(deps.get_current_user)
):
    courses = course_service.list_published(db, capabilities=capabilities, skip=skip, limit=limit)
    return APIResponse(message="Courses retrieved successfully", data=courses)


@router.get("/{course_id}", response_model=APIResponse[CourseDetail])
async def get_course(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    capabilities: SchemaCapabilities = Depends(deps.get_capabilities),
    current_user: User = Depends(deps.get_current_user)
):
    course = course_service.get_course(db, course_id=course_id, capabilities=capabilities)
    return APIResponse(message="Course retrieved successfully", data=course)
