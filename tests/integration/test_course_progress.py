from datetime import datetime, timedelta
import pytest

from lms.core.capabilities import FULL_CAPABILITIES
from lms.core.constants import LessonStatusEnum, LessonTypeEnum
from lms.core.exceptions import NotFoundError
from lms.crud.enrollment import enrollment as crud_enrollment
from lms.services.course_progress import course_progress_service
from lms.services.lesson_progress import lesson_progress_service


def _complete(db_session, user, lesson, **kwargs):
    return lesson_progress_service.complete_lesson(
        db_session, user_id=user.id, lesson_id=lesson.id, capabilities=FULL_CAPABILITIES, **kwargs
    )


def test_progress_rounds_and_completes_at_full(db_session, learner, course_factory, lesson_factory, enrollment_factory):
    print("\n[TEST] Course completion across three lessons")
    course = course_factory()
    lessons = [lesson_factory(course, order_index=i) for i in range(3)]
    enrollment_factory(learner, course)

    print("[1] Completing two of three lessons")
    _complete(db_session, learner, lessons[0])
    result = _complete(db_session, learner, lessons[1])
    assert result.course_progress == 67
    enrollment = crud_enrollment.get_by_user_and_course(db_session, user_id=learner.id, course_id=course.id)
    assert enrollment.completed_at is None

    print("[2] Completing the last lesson")
    result = _complete(db_session, learner, lessons[2])
    assert result.course_progress == 100
    db_session.refresh(enrollment)
    assert enrollment.completed_at is not None
    print("[OK] Enrollment marked completed")


def test_unpublished_lessons_do_not_count(db_session, learner, course_factory, lesson_factory, enrollment_factory):
    course = course_factory()
    published = lesson_factory(course)
    lesson_factory(course, is_published=False)
    enrollment_factory(learner, course)

    result = _complete(db_session, learner, published)
    assert result.course_progress == 100


def test_course_without_published_lessons_never_completes(db_session, learner, course_factory, enrollment_factory):
    course = course_factory()
    enrollment = enrollment_factory(learner, course)

    assert course_progress_service.sync_completion(db_session, user_id=learner.id, course_id=course.id) == 0
    db_session.refresh(enrollment)
    assert enrollment.completed_at is None


def test_completion_timestamp_is_kept(db_session, learner, course_factory, lesson_factory, enrollment_factory):
    course = course_factory()
    lesson_factory(course)
    finished = datetime.utcnow() - timedelta(days=3)
    enrollment = enrollment_factory(learner, course, completed_at=finished)
    lesson = course.lessons[0]

    _complete(db_session, learner, lesson)
    db_session.refresh(enrollment)
    assert enrollment.completed_at == finished


def test_progress_detail(db_session, learner, course_factory, lesson_factory):
    course = course_factory()
    first = lesson_factory(course, order_index=1, title="Welcome")
    quiz = lesson_factory(course, order_index=2, lesson_type=LessonTypeEnum.QUIZ, title="Check")
    lesson_factory(course, order_index=3, is_published=False)

    _complete(db_session, learner, first)
    _complete(db_session, learner, quiz, quiz_score=2, total_questions=4)

    detail = course_progress_service.get_detail(db_session, user_id=learner.id, course_id=course.id)
    assert detail.course_progress == 50
    assert [item.lesson_title for item in detail.lessons] == ["Welcome", "Check"]
    assert detail.lessons[0].status == LessonStatusEnum.COMPLETED
    assert detail.lessons[1].status == LessonStatusEnum.IN_PROGRESS
    assert detail.lessons[1].quiz_score == 50
    assert detail.lessons[1].quiz_attempts == 1


def test_progress_detail_unknown_course(db_session, learner):
    with pytest.raises(NotFoundError):
        course_progress_service.get_detail(db_session, user_id=learner.id, course_id=999)


def test_dashboard(db_session, learner, course_factory, lesson_factory, enrollment_factory):
    done = course_factory(title="Done")
    lesson_factory(done)
    enrollment_factory(learner, done, completed_at=datetime.utcnow(), enrolled_at=datetime.utcnow() - timedelta(days=10))

    active = course_factory(title="Active")
    active_lessons = [lesson_factory(active, order_index=i) for i in range(4)]
    quiz = lesson_factory(active, order_index=5, lesson_type=LessonTypeEnum.QUIZ)
    enrollment_factory(learner, active, enrolled_at=datetime.utcnow())

    _complete(db_session, learner, active_lessons[0])
    _complete(db_session, learner, quiz, quiz_score=9, total_questions=10)
    _complete(db_session, learner, done.lessons[0])

    stats = course_progress_service.get_dashboard(db_session, user_id=learner.id)
    assert stats.enrolled_courses == 2
    assert stats.completed_courses == 1
    assert stats.lessons_completed == 3
    assert stats.average_quiz_score == 90
    assert len(stats.current_courses) == 1
    current = stats.current_courses[0]
    assert current.title == "Active"
    assert current.completed_lessons == 2
    assert current.total_lessons == 5
    assert current.progress == 40


def test_dashboard_limits_current_courses(db_session, learner, course_factory, enrollment_factory):
    base = datetime.utcnow()
    for i in range(7):
        enrollment_factory(learner, course_factory(title=f"C{i}"), enrolled_at=base - timedelta(hours=i))

    stats = course_progress_service.get_dashboard(db_session, user_id=learner.id)
    assert [c.title for c in stats.current_courses] == ["C0", "C1", "C2", "C3", "C4"]
