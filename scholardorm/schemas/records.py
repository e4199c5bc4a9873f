"""Typed records parsed from backend rows at the fetch boundary.

Null or missing optional columns fall back to the field defaults (zero,
empty string, False). Naive timestamps are read as UTC and aware ones are
converted to UTC. A row missing a required key fails validation and is
dropped by the repository.
"""

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, model_validator


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class RowRecord(BaseModel):
    """Base for every backend row."""

    model_config = {"extra": "ignore", "frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class UserRecord(RowRecord):
    id: str
    email: str = ""
    full_name: str = ""
    avatar_url: str = ""
    role: str = "student"
    streak_count: int = 0
    last_login: UtcDatetime | None = None
    created_at: UtcDatetime | None = None


class CourseRecord(RowRecord):
    id: str
    title: str = ""
    description: str = ""
    subject: str = ""
    is_active: bool = True
    created_at: UtcDatetime | None = None


class LessonRecord(RowRecord):
    id: str
    course_id: str
    title: str = ""
    is_published: bool = True


class QuizRecord(RowRecord):
    id: str
    course_id: str | None = None
    lesson_id: str | None = None
    title: str = ""
    passing_score: float = 70.0


class EnrollmentRecord(RowRecord):
    """One ``user_courses`` row."""

    id: str = ""
    user_id: str
    course_id: str
    progress_percentage: float = 0.0
    completed: bool = False
    favorite: bool = False
    enrolled_at: UtcDatetime | None = None
    last_accessed: UtcDatetime | None = None
    completion_date: UtcDatetime | None = None


class LessonProgressRecord(RowRecord):
    """One ``user_progress`` row."""

    user_id: str
    lesson_id: str
    completed: bool = False
    time_spent_seconds: float = 0.0
    completed_at: UtcDatetime | None = None


class QuizAttemptRecord(RowRecord):
    id: str = ""
    user_id: str
    quiz_id: str
    score: float = 0.0
    percentage: float = 0.0
    is_passed: bool = False
    time_spent_seconds: float = 0.0
    completed_at: UtcDatetime | None = None


class AssignmentRecord(RowRecord):
    teacher_id: str
    course_id: str
    is_active: bool = True


class ActivityRecord(RowRecord):
    user_id: str = ""
    activity_type: str
    created_at: UtcDatetime
