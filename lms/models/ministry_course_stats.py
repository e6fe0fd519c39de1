from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, UniqueConstraint
from lms.core.database import Base


class MinistryCourseStats(Base):
    """Materialized projection of per-(ministry, course) progress.

    Rebuilt wholesale from enrollments and lesson progress; never authoritative.
    """
    __tablename__ = "ministry_course_stats"
    __table_args__ = (
        UniqueConstraint("ministry", "course_id", name="uq_ministry_course_stats"),
    )

    id = Column(Integer, primary_key=True, index=True)
    ministry = Column(String, nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    enrolled_count = Column(Integer, nullable=False, default=0)
    completed_count = Column(Integer, nullable=False, default=0)
    avg_score = Column(Float, nullable=False, default=0)
    overdue_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False)
