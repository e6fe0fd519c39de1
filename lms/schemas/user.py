from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from lms.core.constants import RoleEnum


class UserCreate(BaseModel):
    email: str
    full_name: Optional[str] = None
    role: RoleEnum = RoleEnum.LEARNER
    ministry: Optional[str] = None
    is_active: bool = True
    last_login: Optional[datetime] = None


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: Optional[str] = None
    role: RoleEnum
    ministry: Optional[str] = None
    is_active: bool
