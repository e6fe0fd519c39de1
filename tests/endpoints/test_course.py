from lms.core.constants import LessonTypeEnum
from tests.helpers.asserts import api_call, assert_error


def test_catalog_lists_published_courses(client, learner, auth_headers, course_factory, lesson_factory):
    visible = course_factory(title="Visible", order_index=1)
    course_factory(title="Draft", is_published=False)
    lesson_factory(visible, title="Second", order_index=2)
    lesson_factory(visible, title="First", order_index=1)
    lesson_factory(visible, title="Hidden", is_published=False)

    response = api_call(client, "GET", "/courses/", headers=auth_headers(learner))

    courses = response.json()["data"]
    assert [c["title"] for c in courses] == ["Visible"]
    assert [lesson["title"] for lesson in courses[0]["lessons"]] == ["First", "Second"]


def test_course_detail_shows_passing_scores(client, learner, auth_headers, course_factory, lesson_factory):
    course = course_factory()
    lesson_factory(course, lesson_type=LessonTypeEnum.QUIZ)
    lesson_factory(course, lesson_type=LessonTypeEnum.QUIZ, passing_score=90, order_index=1)

    response = api_call(client, "GET", f"/courses/{course.id}", headers=auth_headers(learner))

    lessons = response.json()["data"]["lessons"]
    assert [lesson["passing_score"] for lesson in lessons] == [70, 90]


def test_unknown_course(client, learner, auth_headers):
    response = client.get("/courses/31337", headers=auth_headers(learner))
    assert_error(response, 404, "NOT_FOUND")
