import pytest

from lms.core.capabilities import FULL_CAPABILITIES
from lms.core.constants import LessonStatusEnum, LessonTypeEnum
from lms.core.exceptions import InvalidInputError, NotFoundError, UnsupportedFeatureError
from lms.crud.enrollment import enrollment as crud_enrollment
from lms.crud.lesson_progress import lesson_progress as crud_lesson_progress
from lms.models.lesson_progress import LessonProgress
from lms.services.lesson_progress import lesson_progress_service


@pytest.fixture
def quiz_course(learner, course_factory, lesson_factory, enrollment_factory):
    course = course_factory()
    quiz = lesson_factory(course, lesson_type=LessonTypeEnum.QUIZ, passing_score=70)
    enrollment_factory(learner, course)
    return course, quiz


def _complete(db_session, user, lesson, **kwargs):
    return lesson_progress_service.complete_lesson(
        db_session, user_id=user.id, lesson_id=lesson.id, capabilities=FULL_CAPABILITIES, **kwargs
    )


def test_failed_quiz_stays_in_progress(db_session, learner, quiz_course):
    course, quiz = quiz_course

    result = _complete(db_session, learner, quiz, quiz_score=6, total_questions=10)

    assert result.passed is False
    assert result.quiz_result.percentage == 60
    assert result.quiz_result.passing_score == 70
    assert result.course_progress == 0
    assert result.progress.status == LessonStatusEnum.IN_PROGRESS
    assert result.progress.quiz_score == 60
    assert result.progress.quiz_attempts == 1
    assert result.progress.passed is False
    assert result.progress.completed_at is None

    enrollment = crud_enrollment.get_by_user_and_course(db_session, user_id=learner.id, course_id=course.id)
    assert enrollment.completed_at is None


def test_passing_quiz_completes_lesson_and_course(db_session, learner, quiz_course):
    course, quiz = quiz_course

    result = _complete(db_session, learner, quiz, quiz_score=8, total_questions=10)

    assert result.passed is True
    assert result.quiz_result.percentage == 80
    assert result.course_progress == 100
    assert result.progress.status == LessonStatusEnum.COMPLETED
    assert result.progress.progress_percent == 100
    assert result.progress.quiz_score == 80
    assert result.progress.passed is True
    assert result.progress.completed_at is not None

    enrollment = crud_enrollment.get_by_user_and_course(db_session, user_id=learner.id, course_id=course.id)
    assert enrollment.completed_at is not None


def test_attempts_count_every_scored_submission(db_session, learner, quiz_course):
    _, quiz = quiz_course

    _complete(db_session, learner, quiz, quiz_score=3, total_questions=10)
    _complete(db_session, learner, quiz, quiz_score=9, total_questions=10)
    result = _complete(db_session, learner, quiz, quiz_score=9, total_questions=10)

    assert result.progress.quiz_attempts == 3
    assert result.progress.status == LessonStatusEnum.COMPLETED
    assert db_session.query(LessonProgress).count() == 1


def test_repeat_completion_reaches_same_terminal_state(db_session, learner, quiz_course):
    _, quiz = quiz_course

    first = _complete(db_session, learner, quiz, quiz_score=7, total_questions=10)
    second = _complete(db_session, learner, quiz, quiz_score=7, total_questions=10)

    assert first.progress.status == second.progress.status == LessonStatusEnum.COMPLETED
    assert first.progress.quiz_score == second.progress.quiz_score == 70
    assert second.progress.passed is True
    assert second.progress.quiz_attempts == 2


def test_failed_retake_overwrites_pass(db_session, learner, quiz_course):
    course, quiz = quiz_course
    _complete(db_session, learner, quiz, quiz_score=10, total_questions=10)

    result = _complete(db_session, learner, quiz, quiz_score=1, total_questions=10)

    assert result.progress.passed is False
    assert result.progress.quiz_score == 10
    assert result.progress.quiz_attempts == 2
    assert result.progress.status == LessonStatusEnum.COMPLETED
    assert result.progress.progress_percent == 100
    assert result.progress.completed_at is not None
    assert result.course_progress == 100
    enrollment = crud_enrollment.get_by_user_and_course(db_session, user_id=learner.id, course_id=course.id)
    assert enrollment.completed_at is not None, "course completion is never undone"


def test_quiz_requires_score_and_total(db_session, learner, quiz_course):
    _, quiz = quiz_course
    with pytest.raises(InvalidInputError):
        _complete(db_session, learner, quiz)
    with pytest.raises(InvalidInputError):
        _complete(db_session, learner, quiz, quiz_score=5, total_questions=0)
    with pytest.raises(InvalidInputError):
        _complete(db_session, learner, quiz, quiz_score=11, total_questions=10)
    assert db_session.query(LessonProgress).count() == 0


def test_zero_passing_score_is_respected(db_session, learner, course_factory, lesson_factory):
    course = course_factory()
    quiz = lesson_factory(course, lesson_type=LessonTypeEnum.QUIZ, passing_score=0)
    result = _complete(db_session, learner, quiz, quiz_score=0, total_questions=4)
    assert result.passed is True
    assert result.quiz_result.passing_score == 0


def test_content_lesson_completion_leaves_attempts_alone(db_session, learner, course_factory, lesson_factory):
    course = course_factory()
    lesson = lesson_factory(course)

    result = _complete(db_session, learner, lesson)

    assert result.passed is True
    assert result.quiz_result is None
    assert result.progress.quiz_attempts == 0
    assert result.progress.quiz_score is None
    assert result.progress.status == LessonStatusEnum.COMPLETED


def test_completion_does_not_require_enrollment(db_session, learner, course_factory, lesson_factory):
    course = course_factory()
    lesson = lesson_factory(course)
    result = _complete(db_session, learner, lesson)
    assert result.course_progress == 100
    assert crud_enrollment.get_by_user_and_course(db_session, user_id=learner.id, course_id=course.id) is None


def test_unknown_lesson(db_session, learner):
    with pytest.raises(NotFoundError):
        lesson_progress_service.complete_lesson(db_session, user_id=learner.id, lesson_id=404, capabilities=FULL_CAPABILITIES)


def test_update_progress_creates_and_merges(db_session, learner, course_factory, lesson_factory):
    course = course_factory()
    lesson = lesson_factory(course, lesson_type=LessonTypeEnum.VIDEO)

    first = lesson_progress_service.update_progress(
        db_session, user_id=learner.id, lesson_id=lesson.id, capabilities=FULL_CAPABILITIES,
        status=LessonStatusEnum.IN_PROGRESS, progress_percent=40,
    )
    assert first.progress.status == LessonStatusEnum.IN_PROGRESS
    assert first.progress.progress_percent == 40
    assert first.progress.started_at is not None
    assert first.course_progress == 0

    second = lesson_progress_service.update_progress(
        db_session, user_id=learner.id, lesson_id=lesson.id, capabilities=FULL_CAPABILITIES,
        progress_percent=75,
    )
    assert second.progress.status == LessonStatusEnum.IN_PROGRESS, "omitted fields keep their stored value"
    assert second.progress.progress_percent == 75
    assert second.progress.started_at == first.progress.started_at


def test_update_progress_defaults_new_rows_to_not_started(db_session, learner, course_factory, lesson_factory):
    course = course_factory()
    lesson = lesson_factory(course)
    result = lesson_progress_service.update_progress(
        db_session, user_id=learner.id, lesson_id=lesson.id, capabilities=FULL_CAPABILITIES, progress_percent=10,
    )
    assert result.progress.status == LessonStatusEnum.NOT_STARTED


def test_update_progress_cannot_complete(db_session, learner, course_factory, lesson_factory):
    course = course_factory()
    lesson = lesson_factory(course)
    with pytest.raises(InvalidInputError):
        lesson_progress_service.update_progress(
            db_session, user_id=learner.id, lesson_id=lesson.id, capabilities=FULL_CAPABILITIES,
            status=LessonStatusEnum.COMPLETED,
        )
    assert crud_lesson_progress.get_by_user_and_lesson(db_session, user_id=learner.id, lesson_id=lesson.id) is None


def test_update_progress_rejects_quiz_scores_on_quizzes(db_session, learner, quiz_course):
    _, quiz = quiz_course
    with pytest.raises(InvalidInputError):
        lesson_progress_service.update_progress(
            db_session, user_id=learner.id, lesson_id=quiz.id, capabilities=FULL_CAPABILITIES, quiz_score=100,
        )


def test_update_progress_never_regresses_completed(db_session, learner, course_factory, lesson_factory):
    course = course_factory()
    lesson = lesson_factory(course)
    _complete(db_session, learner, lesson)

    result = lesson_progress_service.update_progress(
        db_session, user_id=learner.id, lesson_id=lesson.id, capabilities=FULL_CAPABILITIES,
        status=LessonStatusEnum.IN_PROGRESS,
    )
    assert result.progress.status == LessonStatusEnum.COMPLETED
    assert result.course_progress == 100


def test_update_progress_score_on_content_lesson_counts_attempt(db_session, learner, course_factory, lesson_factory):
    course = course_factory()
    lesson = lesson_factory(course, lesson_type=LessonTypeEnum.DOCUMENT)
    result = lesson_progress_service.update_progress(
        db_session, user_id=learner.id, lesson_id=lesson.id, capabilities=FULL_CAPABILITIES, quiz_score=55,
    )
    assert result.progress.quiz_score == 55
    assert result.progress.quiz_attempts == 1


def test_update_progress_percent_bounds(db_session, learner, course_factory, lesson_factory):
    course = course_factory()
    lesson = lesson_factory(course)
    with pytest.raises(InvalidInputError):
        lesson_progress_service.update_progress(
            db_session, user_id=learner.id, lesson_id=lesson.id, capabilities=FULL_CAPABILITIES, progress_percent=101,
        )


def test_requirements_defaults_and_after_attempt(db_session, learner, quiz_course):
    _, quiz = quiz_course

    before = lesson_progress_service.get_requirements(
        db_session, user_id=learner.id, lesson_id=quiz.id, capabilities=FULL_CAPABILITIES
    )
    assert before.passing_score == 70
    assert before.current_score is None
    assert before.attempts == 0
    assert before.passed is False
    assert before.status == LessonStatusEnum.NOT_STARTED
    assert before.lesson_type == "quiz"

    _complete(db_session, learner, quiz, quiz_score=4, total_questions=5)
    after = lesson_progress_service.get_requirements(
        db_session, user_id=learner.id, lesson_id=quiz.id, capabilities=FULL_CAPABILITIES
    )
    assert after.current_score == 80
    assert after.attempts == 1
    assert after.passed is True
    assert after.status == LessonStatusEnum.COMPLETED


def test_requirements_unknown_lesson(db_session, learner):
    with pytest.raises(NotFoundError):
        lesson_progress_service.get_requirements(db_session, user_id=learner.id, lesson_id=404, capabilities=FULL_CAPABILITIES)


def test_partial_update_keeps_completed_progress(db_session, learner, course_factory, lesson_factory):
    lesson = lesson_factory(course_factory())
    _complete(db_session, learner, lesson)

    result = lesson_progress_service.update_progress(
        db_session,
        user_id=learner.id,
        lesson_id=lesson.id,
        capabilities=FULL_CAPABILITIES,
        status=LessonStatusEnum.IN_PROGRESS,
        progress_percent=30,
    )

    assert result.progress.status == LessonStatusEnum.COMPLETED
    assert result.progress.progress_percent == 100
    assert result.course_progress == 100


class _MySQLBind:
    class dialect:
        name = "mysql"


class _MySQLSession:
    def get_bind(self):
        return _MySQLBind()


def test_upsert_rejects_dialect_without_on_conflict():
    with pytest.raises(UnsupportedFeatureError) as exc_info:
        crud_lesson_progress.upsert(
            _MySQLSession(), user_id=1, lesson_id=1, course_id=1, values={"progress_percent": 10},
        )
    assert exc_info.value.status_code == 501
    assert exc_info.value.feature == "lesson_progress_upsert"
