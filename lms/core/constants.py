from enum import Enum


DEFAULT_PASSING_SCORE = 70
URGENT_WINDOW_DAYS = 7
UPCOMING_WINDOW_DAYS = 14
ACTIVE_LEARNER_WINDOW_DAYS = 30
DASHBOARD_CURRENT_COURSES_LIMIT = 5
DEFAULT_ACTIVITY_LIMIT = 20
MAX_ACTIVITY_LIMIT = 100

class RoleEnum(str, Enum):
    LEARNER = "LEARNER"
    SUPERUSER = "SUPERUSER"
    ADMIN = "ADMIN"

# Roles counted as learners in ministry and platform reporting
LEARNER_ROLES = (RoleEnum.LEARNER, RoleEnum.SUPERUSER)

class CourseLevelEnum(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

class LessonTypeEnum(str, Enum):
    CONTENT = "content"
    VIDEO = "video"
    DOCUMENT = "document"
    QUIZ = "quiz"

class LessonStatusEnum(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

class DeadlineStatusEnum(str, Enum):
    COMPLETED = "completed"
    NO_DEADLINE = "no_deadline"
    OVERDUE = "overdue"
    URGENT = "urgent"
    UPCOMING = "upcoming"
    ON_TRACK = "on_track"

class FeatureEnum(str, Enum):
    DEADLINES = "deadlines"
    PASSING_SCORES = "passing_scores"
    PREREQUISITES = "prerequisites"
    QUIZ_PASS_FLAG = "quiz_pass_flag"
    MINISTRY_COURSE_STATS = "ministry_course_stats"
