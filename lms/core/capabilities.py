import logging
from dataclasses import dataclass
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from lms.core.constants import FeatureEnum
from lms.core.exceptions import UnsupportedFeatureError

logger = logging.getLogger(__name__)

# (table, column) pairs each optional feature depends on
FEATURE_COLUMNS = {
    FeatureEnum.DEADLINES: [
        ("courses", "deadline"),
        ("courses", "is_mandatory"),
        ("enrollments", "deadline"),
        ("enrollments", "is_overdue"),
    ],
    FeatureEnum.PASSING_SCORES: [("lessons", "passing_score")],
    FeatureEnum.PREREQUISITES: [("courses", "prerequisite_course_id")],
    FeatureEnum.QUIZ_PASS_FLAG: [("lesson_progress", "passed")],
}


@dataclass(frozen=True)
class SchemaCapabilities:
    """Optional features the connected schema supports.

    Resolved once when the application starts. Services branch on these flags
    instead of reacting to missing-column errors from the database.
    """

    deadlines: bool = True
    passing_scores: bool = True
    prerequisites: bool = True
    quiz_pass_flag: bool = True
    ministry_course_stats: bool = True

    def supports(self, feature: FeatureEnum) -> bool:
        return bool(getattr(self, feature.value))

    def require(self, feature: FeatureEnum, message: str = None):
        if not self.supports(feature):
            raise UnsupportedFeatureError(feature.value, message)

    @property
    def missing(self):
        return [f.value for f in FeatureEnum if not self.supports(f)]


FULL_CAPABILITIES = SchemaCapabilities()


def resolve_capabilities(engine: Engine) -> SchemaCapabilities:
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())
    columns = {
        table: {col["name"] for col in inspector.get_columns(table)}
        for table in ("courses", "lessons", "enrollments", "lesson_progress")
        if table in tables
    }

    def has_all(pairs) -> bool:
        return all(column in columns.get(table, set()) for table, column in pairs)

    flags = {feature.value: has_all(pairs) for feature, pairs in FEATURE_COLUMNS.items()}
    flags[FeatureEnum.MINISTRY_COURSE_STATS.value] = "ministry_course_stats" in tables

    capabilities = SchemaCapabilities(**flags)
    if capabilities.missing:
        logger.warning(f"Schema is missing optional features: {', '.join(capabilities.missing)}")
    else:
        logger.info("Schema supports all optional features")
    return capabilities
