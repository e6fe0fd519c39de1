from typing import List
from sqlalchemy import func
from sqlalchemy.orm import Session

from lms.crud.base import CRUDBase
from lms.core.constants import LEARNER_ROLES
from lms.models.user import User
from lms.schemas.user import UserCreate


class CRUDUser(CRUDBase[User, UserCreate, UserCreate]):
    def get_with_ministry(self, db: Session) -> List[User]:
        return db.query(User).filter(User.ministry.isnot(None)).order_by(User.id).all()

    def count_learners(self, db: Session) -> int:
        return db.query(func.count(User.id)).filter(User.role.in_(LEARNER_ROLES)).scalar()


user = CRUDUser(User)
