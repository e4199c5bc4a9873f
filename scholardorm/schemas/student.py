"""Teacher student-list and quiz-attempt listing schemas."""

import enum
from datetime import datetime

from pydantic import BaseModel


class StudentStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    STRUGGLING = "struggling"


class StudentListItem(BaseModel):
    """Compact row for the teacher's student table."""

    id: str
    name: str
    email: str = ""
    avatar: str = ""
    progress: float = 0.0
    courses_completed: int = 0
    total_courses: int = 0
    last_active: datetime | None = None
    status: StudentStatus = StudentStatus.INACTIVE
    average_score: float = 0.0
    streak: int = 0
    courses: list[str] = []


class AttemptRow(BaseModel):
    """A quiz attempt joined with its student, quiz and course."""

    id: str
    student_id: str
    student_name: str
    student_email: str = ""
    quiz_id: str
    quiz_title: str
    course_id: str = ""
    course_title: str
    score: float = 0.0
    percentage: float = 0.0
    passed: bool = False
    completed_at: datetime | None = None
    time_spent_seconds: float = 0.0
