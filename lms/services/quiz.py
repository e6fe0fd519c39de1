from typing import Optional

from lms.core.capabilities import SchemaCapabilities
from lms.core.constants import DEFAULT_PASSING_SCORE
from lms.core.exceptions import InvalidInputError
from lms.models.lesson import Lesson
from lms.schemas.lesson_progress import QuizResult
from lms.utils.numbers import round_half_up


def effective_passing_score(lesson: Lesson, capabilities: SchemaCapabilities) -> int:
    """Passing threshold for a lesson; 70 when unset or unsupported by the schema."""
    if not capabilities.passing_scores:
        return DEFAULT_PASSING_SCORE
    if lesson.passing_score is None:
        return DEFAULT_PASSING_SCORE
    return lesson.passing_score


def evaluate_quiz(score: Optional[int], total_questions: Optional[int], passing_score: int) -> QuizResult:
    if score is None or total_questions is None:
        raise InvalidInputError("Quiz lessons require quiz_score and total_questions.")
    if total_questions <= 0:
        raise InvalidInputError("total_questions must be greater than zero.")
    if score < 0 or score > total_questions:
        raise InvalidInputError("quiz_score must be between 0 and total_questions.")

    percentage = round_half_up(score / total_questions * 100)
    return QuizResult(
        passed=percentage >= passing_score,
        percentage=percentage,
        passing_score=passing_score,
    )


def validate_passing_score(score: int):
    if score < 0 or score > 100:
        raise InvalidInputError("Passing score must be between 0 and 100.")
