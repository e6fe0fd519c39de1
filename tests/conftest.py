import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ["TESTING"] = "true"

import uuid
import pytest
from datetime import datetime
from fastapi.testclient import TestClient

import main
from lms.core.capabilities import FULL_CAPABILITIES
from lms.core.constants import CourseLevelEnum, LessonTypeEnum, RoleEnum
from lms.core.database import Database
from lms.core.security import create_access_token
from lms.crud.course import course as crud_course
from lms.crud.enrollment import enrollment as crud_enrollment
from lms.crud.lesson import lesson as crud_lesson
from lms.crud.user import user as crud_user
from lms.utils import deps as deps_utils
import lms.models.registry  # noqa: F401


@pytest.fixture(scope="function")
def database():
    database = Database("sqlite://")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    db = database.session()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def capabilities():
    return FULL_CAPABILITIES


@pytest.fixture(scope="function")
def client(database, db_session, capabilities):
    app = main.create_app(database=database, capabilities=capabilities)
    app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_factory(db_session):
    def _create(email=None, role=RoleEnum.LEARNER, ministry=None, last_login=None, is_active=True, full_name="Test Learner"):
        return crud_user.create(db_session, obj_in={
            "email": email or f"user-{uuid.uuid4().hex[:8]}@test.gov",
            "full_name": full_name,
            "role": role,
            "ministry": ministry,
            "last_login": last_login,
            "is_active": is_active,
        })
    return _create


@pytest.fixture
def course_factory(db_session):
    def _create(title=None, level=CourseLevelEnum.BEGINNER, prerequisite_course_id=None, deadline=None,
                is_mandatory=False, is_published=True, order_index=0):
        return crud_course.create(db_session, obj_in={
            "title": title or f"Course {uuid.uuid4().hex[:6]}",
            "level": level,
            "prerequisite_course_id": prerequisite_course_id,
            "deadline": deadline,
            "is_mandatory": is_mandatory,
            "is_published": is_published,
            "order_index": order_index,
        })
    return _create


@pytest.fixture
def lesson_factory(db_session):
    def _create(course, lesson_type=LessonTypeEnum.CONTENT, passing_score=None, is_published=True,
                duration=30, order_index=0, title=None):
        values = {
            "course_id": course.id,
            "title": title or f"Lesson {uuid.uuid4().hex[:6]}",
            "lesson_type": lesson_type,
            "duration": duration,
            "order_index": order_index,
            "is_published": is_published,
        }
        if passing_score is not None:
            values["passing_score"] = passing_score
        return crud_lesson.create(db_session, obj_in=values)
    return _create


@pytest.fixture
def enrollment_factory(db_session):
    def _create(user, course, completed_at=None, deadline=None, enrolled_at=None):
        return crud_enrollment.create(db_session, obj_in={
            "user_id": user.id,
            "course_id": course.id,
            "completed_at": completed_at,
            "deadline": deadline,
            "enrolled_at": enrolled_at or datetime.utcnow(),
        })
    return _create


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers


@pytest.fixture
def learner(user_factory):
    return user_factory(email="learner@test.gov", ministry="Ministry of Education")


@pytest.fixture
def admin(user_factory):
    return user_factory(email="admin@test.gov", role=RoleEnum.ADMIN, full_name="Platform Admin")
