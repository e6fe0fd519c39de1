from typing import List, Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session

from lms.crud.base import CRUDBase
from lms.models.ministry_course_stats import MinistryCourseStats


class CRUDMinistryCourseStats(CRUDBase[MinistryCourseStats, BaseModel, BaseModel]):

    def get_filtered(self, db: Session, ministry: Optional[str] = None) -> List[MinistryCourseStats]:
        query = db.query(MinistryCourseStats)
        if ministry:
            query = query.filter(MinistryCourseStats.ministry == ministry)
        return query.order_by(MinistryCourseStats.ministry, MinistryCourseStats.enrolled_count.desc()).all()

    def replace_all(self, db: Session, rows: List[dict]) -> int:
        """Swap the whole projection for ``rows`` inside the caller's transaction."""
        db.query(MinistryCourseStats).delete()
        if rows:
            db.bulk_insert_mappings(MinistryCourseStats, rows)
        db.flush()
        return len(rows)


ministry_course_stats = CRUDMinistryCourseStats(MinistryCourseStats)
