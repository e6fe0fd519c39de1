from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean, Enum, UniqueConstraint, false
from sqlalchemy.orm import relationship, deferred
from lms.core.database import Base
from lms.core.constants import LessonStatusEnum


class LessonProgress(Base):
    __tablename__ = "lesson_progress"
    __mapper_args__ = {"eager_defaults": False}
    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_lesson_progress_user_lesson"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Enum(LessonStatusEnum), nullable=False, default=LessonStatusEnum.NOT_STARTED)
    progress_percent = Column(Integer, nullable=False, default=0)
    quiz_score = Column(Integer, nullable=True)
    quiz_attempts = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    last_accessed = Column(DateTime, nullable=True)

    passed = deferred(Column(Boolean, nullable=False, server_default=false()))

    user = relationship("User", back_populates="lesson_progress")
    lesson = relationship("Lesson", back_populates="progress_records")
