from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from lms.core.capabilities import SchemaCapabilities


class EnrollmentDeadlineUpdate(BaseModel):
    deadline: Optional[datetime] = None


class EnrollmentCreated(BaseModel):
    enrollment_id: int


class Enrollment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    course_id: int
    enrolled_at: datetime
    completed_at: Optional[datetime] = None
    deadline: Optional[datetime] = None
    is_overdue: bool = False

    @classmethod
    def build(cls, enrollment, capabilities: SchemaCapabilities):
        data = {
            "id": enrollment.id,
            "user_id": enrollment.user_id,
            "course_id": enrollment.course_id,
            "enrolled_at": enrollment.enrolled_at,
            "completed_at": enrollment.completed_at,
        }
        if capabilities.deadlines:
            data["deadline"] = enrollment.deadline
            data["is_overdue"] = bool(enrollment.is_overdue)
        return cls(**data)
