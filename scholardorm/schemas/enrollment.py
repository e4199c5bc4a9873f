"""Enrollment write schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class EnrollmentPatch(BaseModel):
    """PATCH /api/enrollments/{id}: only the fields dashboards touch."""

    favorite: bool | None = None
    progress_percentage: float | None = Field(default=None, ge=0, le=100)


class EnrollmentRead(BaseModel):
    id: str
    user_id: str
    course_id: str
    progress_percentage: float = 0.0
    completed: bool = False
    favorite: bool = False
    last_accessed: datetime | None = None
