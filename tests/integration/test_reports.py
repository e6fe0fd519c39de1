from datetime import datetime, timedelta

from lms.core.capabilities import FULL_CAPABILITIES
from lms.core.constants import LessonStatusEnum, LessonTypeEnum, RoleEnum
from lms.services.lesson_progress import lesson_progress_service
from lms.services.report import report_service


def test_dashboard_stats(db_session, user_factory, course_factory, lesson_factory, enrollment_factory):
    print("\n[TEST] Admin dashboard stats")
    alice = user_factory(ministry="Health")
    bob = user_factory(role=RoleEnum.SUPERUSER)
    user_factory(role=RoleEnum.ADMIN)

    course = course_factory(deadline=datetime.utcnow() - timedelta(days=1))
    video = lesson_factory(course, lesson_type=LessonTypeEnum.VIDEO, duration=90)
    quiz = lesson_factory(course, lesson_type=LessonTypeEnum.QUIZ, duration=45)
    other = course_factory()
    enrollment_factory(alice, course)
    enrollment_factory(bob, course)
    enrollment_factory(alice, other, completed_at=datetime.utcnow())

    print("[1] Recording progress")
    for user in (alice, bob):
        lesson_progress_service.complete_lesson(db_session, user_id=user.id, lesson_id=video.id, capabilities=FULL_CAPABILITIES)
    lesson_progress_service.complete_lesson(
        db_session, user_id=alice.id, lesson_id=quiz.id, capabilities=FULL_CAPABILITIES, quiz_score=9, total_questions=10
    )
    lesson_progress_service.complete_lesson(
        db_session, user_id=bob.id, lesson_id=quiz.id, capabilities=FULL_CAPABILITIES, quiz_score=2, total_questions=10
    )

    stats = report_service.get_dashboard_stats(db_session, capabilities=FULL_CAPABILITIES)

    assert stats.total_learners == 2
    assert stats.total_courses == 2
    assert stats.total_lessons == 2
    assert stats.total_enrollments == 3
    # alice finished both courses, bob is overdue
    assert stats.completion_rate == 67
    assert stats.overdue_enrollments == 1
    # 90 + 90 + 45 minutes of completed lessons
    assert stats.total_study_hours == 3
    assert stats.average_quiz_score == 55
    assert stats.quiz_pass_rate == 50
    print("[OK] Dashboard stats verified")


def test_overdue_learners(db_session, user_factory, course_factory, enrollment_factory):
    now = datetime(2026, 6, 1, 8, 0, 0)
    course = course_factory(title="Ethics", deadline=now - timedelta(days=4, hours=2))
    late = user_factory(full_name="Late Learner", ministry="Works")
    on_time = user_factory()
    enrollment_factory(late, course)
    enrollment_factory(on_time, course, deadline=now + timedelta(days=2))
    enrollment_factory(user_factory(), course, completed_at=now - timedelta(days=10))

    overdue = report_service.get_overdue_learners(db_session, capabilities=FULL_CAPABILITIES, now=now)

    assert len(overdue) == 1
    assert overdue[0].full_name == "Late Learner"
    assert overdue[0].ministry == "Works"
    assert overdue[0].course_title == "Ethics"
    assert overdue[0].days_overdue == 4


def test_courses_with_stats(db_session, user_factory, course_factory, lesson_factory, enrollment_factory):
    first = course_factory(title="First", order_index=1)
    second = course_factory(title="Second", order_index=2, deadline=datetime.utcnow() - timedelta(days=1))
    lesson_factory(first)
    lesson_factory(first, is_published=False)
    enrollment_factory(user_factory(), second)
    enrollment_factory(user_factory(), second, completed_at=datetime.utcnow())

    courses = report_service.get_courses_with_stats(db_session, capabilities=FULL_CAPABILITIES)

    assert [c.title for c in courses] == ["First", "Second"]
    assert courses[0].lesson_count == 2
    assert courses[0].enrolled_count == 0
    assert courses[1].enrolled_count == 2
    assert courses[1].completed_count == 1
    assert courses[1].overdue_count == 1


def test_content_stats(db_session, course_factory, lesson_factory):
    course = course_factory()
    for _ in range(3):
        lesson_factory(course, lesson_type=LessonTypeEnum.VIDEO)
    lesson_factory(course, lesson_type=LessonTypeEnum.QUIZ)

    stats = report_service.get_content_stats(db_session)

    assert [(s.lesson_type, s.count, s.share) for s in stats] == [("video", 3, 75), ("quiz", 1, 25)]


def test_recent_activity(db_session, user_factory, course_factory, lesson_factory):
    print("\n[TEST] Recent learner activity")
    alice = user_factory(full_name="Alice", ministry="Health")
    bob = user_factory(full_name="Bob")
    course = course_factory(title="Induction")
    intro = lesson_factory(course, title="Intro")
    policy = lesson_factory(course, title="Policy")
    start = datetime(2026, 5, 1, 9, 0, 0)

    lesson_progress_service.complete_lesson(
        db_session, user_id=alice.id, lesson_id=intro.id, capabilities=FULL_CAPABILITIES, now=start
    )
    lesson_progress_service.update_progress(
        db_session, user_id=bob.id, lesson_id=policy.id, capabilities=FULL_CAPABILITIES,
        progress_percent=40, now=start + timedelta(hours=2),
    )
    lesson_progress_service.update_progress(
        db_session, user_id=alice.id, lesson_id=policy.id, capabilities=FULL_CAPABILITIES,
        progress_percent=10, now=start + timedelta(hours=1),
    )

    activity = report_service.get_recent_activity(db_session)

    assert [(a.user_name, a.lesson_title) for a in activity] == [
        ("Bob", "Policy"), ("Alice", "Policy"), ("Alice", "Intro"),
    ]
    assert activity[2].status == LessonStatusEnum.COMPLETED
    assert activity[2].ministry == "Health"
    assert activity[2].course_title == "Induction"

    print("[1] Limits are clamped to 1..100")
    assert len(report_service.get_recent_activity(db_session, limit=0)) == 1
    assert len(report_service.get_recent_activity(db_session, limit=1000)) == 3
    print("[OK] Activity feed verified")
