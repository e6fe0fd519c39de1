from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship, deferred
from sqlalchemy.sql import func
from lms.core.database import Base
from lms.core.constants import LessonTypeEnum

class Lesson(Base):
    __tablename__ = "lessons"
    __mapper_args__ = {"eager_defaults": False}

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    lesson_type = Column(Enum(LessonTypeEnum), nullable=False, default=LessonTypeEnum.CONTENT)
    content = Column(String, nullable=True)
    duration = Column(Integer, nullable=False, default=0) # Duration in minutes
    order_index = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    passing_score = deferred(Column(Integer, nullable=True, server_default="70"))

    course = relationship("Course", back_populates="lessons")
    progress_records = relationship("LessonProgress", back_populates="lesson", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_quiz(self) -> bool:
        return self.lesson_type == LessonTypeEnum.QUIZ
