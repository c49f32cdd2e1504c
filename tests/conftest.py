import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import asyncio
import uuid
import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import main
from app.core.config import settings
from app.core.constants import CourseLanguageEnum, CourseLevelEnum, RoleEnum
from app.core.database import Base, enable_sqlite_foreign_keys
from app.core.security import create_access_token
from app.crud.user import user as crud_user
from app.models.course import Course
from app.models.lesson import Lesson
from app.services.email import EmailService
from app.utils import deps as deps_utils

test_db_url = settings.TEST_DATABASE_URL or "sqlite://"

@pytest.fixture(scope="function")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(
            test_db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        enable_sqlite_foreign_keys(engine)
    else:
        engine = create_engine(test_db_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture(scope="function")
def client(db_session):
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()

@pytest.fixture
def user_factory(db_session):
    def _user_factory(role: RoleEnum = RoleEnum.STUDENT, email: str = None, first_name: str = "Test", last_name: str = "User"):
        return crud_user.create(db_session, obj_in={
            "email": email or f"{role.value}-{uuid.uuid4().hex[:8]}@tonguespace.dev",
            "first_name": first_name,
            "last_name": last_name,
            "role": role,
        })
    return _user_factory

@pytest.fixture
def student(user_factory):
    return user_factory(RoleEnum.STUDENT, first_name="Sara", last_name="Student")

@pytest.fixture
def instructor(user_factory):
    return user_factory(RoleEnum.INSTRUCTOR, first_name="Ivan", last_name="Instructor")

@pytest.fixture
def admin(user_factory):
    return user_factory(RoleEnum.ADMIN, first_name="Ada", last_name="Admin")

@pytest.fixture
def course_factory(db_session, instructor):
    def _course_factory(
        lessons: int = 0,
        unpublished_lessons: int = 0,
        is_published: bool = True,
        owner=None,
        title: str = None,
        description: str = "A sample course",
        language: CourseLanguageEnum = CourseLanguageEnum.ARABIC,
        level: CourseLevelEnum = CourseLevelEnum.BEGINNER,
    ) -> Course:
        course = Course(
            title=title or f"Course {uuid.uuid4().hex[:6]}",
            description=description,
            language=language,
            level=level,
            price=Decimal("19.99"),
            is_published=is_published,
            instructor_id=(owner or instructor).id,
        )
        total = lessons + unpublished_lessons
        course.lessons = [
            Lesson(
                title=f"Lesson {index}",
                order_index=index,
                duration_minutes=10,
                is_published=index <= lessons,
            )
            for index in range(1, total + 1)
        ]
        db_session.add(course)
        db_session.commit()
        db_session.refresh(course)
        return course
    return _course_factory

@pytest.fixture
def auth_headers():
    def _auth_headers(user) -> dict:
        token = create_access_token(user.id, role=user.role)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers

@pytest.fixture
def sent_emails(monkeypatch):
    """Replace the notification collaborator with a recorder.

    Calls are recorded when the notification is scheduled, not when it is delivered.
    """
    sent = []

    def _recorder(kind):
        def _send(email, first_name, *args):
            sent.append({"kind": kind, "email": email, "first_name": first_name, "args": args})
            return asyncio.sleep(0)
        _send.__name__ = f"send_application_{kind}_email"
        return _send

    for kind in ("submitted", "approved", "rejected"):
        monkeypatch.setattr(EmailService, f"send_application_{kind}_email", _recorder(kind))
    return sent

@pytest.fixture
def failing_emails(monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("mail provider is down")

    for kind in ("submitted", "approved", "rejected"):
        monkeypatch.setattr(EmailService, f"send_application_{kind}_email", _boom)
