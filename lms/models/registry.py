# Imported wherever Base.metadata must know every table (app startup, tests, migrations)
from lms.models.user import User  # noqa: F401
from lms.models.course import Course  # noqa: F401
from lms.models.lesson import Lesson  # noqa: F401
from lms.models.enrollment import Enrollment  # noqa: F401
from lms.models.lesson_progress import LessonProgress  # noqa: F401
from lms.models.ministry_course_stats import MinistryCourseStats  # noqa: F401
