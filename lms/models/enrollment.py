from datetime import datetime
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean, UniqueConstraint, false, text
from sqlalchemy.orm import relationship, deferred
from lms.core.database import Base

class Enrollment(Base):
    __tablename__ = "enrollments"
    __mapper_args__ = {"eager_defaults": False}
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    enrolled_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    deadline = deferred(Column(DateTime, nullable=True, index=True, server_default=text("NULL")))
    is_overdue = deferred(Column(Boolean, nullable=False, server_default=false()))

    user = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")
