from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class LMSException(HTTPException):
    """Domain error carrying a stable error code and optional structured details.

    Subclasses HTTPException so routers can let these propagate unchanged and
    the global handler renders them like any other HTTP error.
    """

    status_code_default = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=self.status_code_default, detail=message)
        self.message = message
        self.details = details


class NotFoundError(LMSException):
    status_code_default = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ConflictError(LMSException):
    status_code_default = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class ForbiddenError(LMSException):
    status_code_default = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, message: str, blocking_course_id: Optional[int] = None):
        details = {"blocking_course_id": blocking_course_id} if blocking_course_id is not None else None
        super().__init__(message, details=details)
        self.blocking_course_id = blocking_course_id


class InvalidInputError(LMSException):
    status_code_default = 422
    code = "VALIDATION_ERROR"


class UnsupportedFeatureError(LMSException):
    status_code_default = status.HTTP_501_NOT_IMPLEMENTED
    code = "NOT_IMPLEMENTED"

    def __init__(self, feature: str, message: Optional[str] = None):
        super().__init__(
            message or f"This feature ({feature}) is not supported by the current database schema.",
            details={"feature": feature},
        )
        self.feature = feature
