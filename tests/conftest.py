"""Shared pytest fixtures for the analytics service tests."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from scholardorm.api.deps import get_source
from scholardorm.config import settings
from scholardorm.db import models
from scholardorm.db.session import Base
from scholardorm.main import app
from scholardorm.services.sql_source import SqlRowSource


# Use an in-memory SQLite database for testing with static pool
SQLALCHEMY_TEST_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # Use StaticPool to keep connection alive
    echo=False,
)
TestSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

NOW = datetime.now(timezone.utc)


@pytest.fixture(scope="function")
def db():
    """Fresh tables and session for each test (the row source commits)."""
    Base.metadata.create_all(bind=engine)
    session = TestSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def source(db: Session) -> SqlRowSource:
    return SqlRowSource(db)


@pytest.fixture(scope="function")
def client(db: Session):
    """FastAPI test client with the row source bound to the test session."""

    def override_get_source():
        yield SqlRowSource(db)

    app.dependency_overrides[get_source] = override_get_source

    # Remove TrustedHostMiddleware for tests to allow 'testserver' host
    app.user_middleware = [m for m in app.user_middleware if "TrustedHost" not in str(m)]

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ── Helpers ────────────────────────────────────────────────────────────────────


def make_token(user_id: str, *, audience: str | None = None, expires_in: int = 3600) -> str:
    """Sign a Supabase-style access token for *user_id*."""
    payload = {
        "sub": user_id,
        "aud": audience or settings.JWT_AUDIENCE,
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


class Seeder:
    """Inserts backend rows through the ORM declarations."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _add(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, role: str = "student", name: str = "Test User", **kw) -> models.User:
        email = kw.pop("email", None) or f"{name.lower().replace(' ', '.')}@ex.com"
        return self._add(models.User(role=role, full_name=name, email=email, **kw))

    def course(self, title: str = "Algebra", **kw) -> models.Course:
        return self._add(models.Course(title=title, **kw))

    def lesson(self, course: models.Course, **kw) -> models.Lesson:
        return self._add(models.Lesson(course_id=course.id, **kw))

    def quiz(self, course: models.Course | None = None, **kw) -> models.Quiz:
        return self._add(models.Quiz(course_id=course.id if course else None, **kw))

    def assign(self, teacher: models.User, course: models.Course, **kw):
        return self._add(
            models.TeacherCourseAssignment(teacher_id=teacher.id, course_id=course.id, **kw)
        )

    def enroll(self, user: models.User, course: models.Course, **kw) -> models.Enrollment:
        return self._add(models.Enrollment(user_id=user.id, course_id=course.id, **kw))

    def complete(self, user: models.User, lesson: models.Lesson, seconds: int = 0, **kw):
        kw.setdefault("completed_at", NOW)
        return self._add(
            models.LessonProgress(
                user_id=user.id,
                lesson_id=lesson.id,
                completed=True,
                time_spent_seconds=seconds,
                **kw,
            )
        )

    def attempt(self, user: models.User, quiz: models.Quiz, percentage: float, **kw):
        kw.setdefault("completed_at", NOW)
        return self._add(
            models.QuizAttempt(
                user_id=user.id,
                quiz_id=quiz.id,
                percentage=percentage,
                score=percentage,
                is_passed=percentage >= quiz.passing_score,
                **kw,
            )
        )

    def activity(self, user: models.User, activity_type: str, created_at: datetime):
        return self._add(
            models.Activity(user_id=user.id, activity_type=activity_type, created_at=created_at)
        )


@pytest.fixture(scope="function")
def seed(db: Session) -> Seeder:
    return Seeder(db)
