from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, false, text
from sqlalchemy.orm import relationship, deferred
from sqlalchemy.sql import func
from lms.core.database import Base
from lms.core.constants import CourseLevelEnum

class Course(Base):
    __tablename__ = "courses"
    # Server-defaulted feature columns are loaded on access, never via RETURNING
    __mapper_args__ = {"eager_defaults": False}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    level = Column(Enum(CourseLevelEnum), nullable=False, default=CourseLevelEnum.BEGINNER)
    order_index = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Feature columns added after the base schema; deferred so an older schema stays readable
    deadline = deferred(Column(DateTime, nullable=True, index=True, server_default=text("NULL")))
    is_mandatory = deferred(Column(Boolean, nullable=False, server_default=false()))
    prerequisite_course_id = deferred(Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True, server_default=text("NULL")))

    lessons = relationship(
        "Lesson",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[Lesson.order_index, Lesson.id]",
    )
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def published_lessons(self):
        return [lesson for lesson in self.lessons if lesson.is_published]
