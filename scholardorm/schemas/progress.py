"""Progress / analytics schemas for the teacher dashboards."""

import enum
from datetime import datetime

from pydantic import BaseModel


class CourseStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class EngagementLevel(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CourseProgress(BaseModel):
    """One student's standing in one course."""

    course_id: str
    course_name: str
    progress: float = 0.0
    lessons_completed: int = 0
    total_lessons: int = 0
    average_score: float = 0.0
    quiz_attempts: int = 0  # 0 means average_score carries no signal
    time_spent: int = 0  # minutes
    last_accessed: datetime | None = None
    status: CourseStatus = CourseStatus.NOT_STARTED


class StudentSummary(BaseModel):
    """Per-student progress summary, recomputed on every fetch."""

    id: str
    name: str
    email: str = ""
    avatar: str = ""
    streak: int = 0
    total_courses: int = 0
    completed_courses: int = 0
    current_course: str = ""
    overall_progress: float = 0.0
    average_score: float = 0.0
    time_spent: int = 0  # minutes
    last_active: datetime | None = None
    strengths: list[str] = []
    improvements: list[str] = []
    course_progress: list[CourseProgress] = []


class ProgressStats(BaseModel):
    """Headline numbers above the teacher's student table."""

    total_students: int = 0
    active_students: int = 0
    average_progress: float = 0.0
    average_score: float = 0.0
    total_time_spent: int = 0
    completion_rate: float = 0.0


class CourseRollup(BaseModel):
    """Per-course aggregate over the student summaries."""

    course_id: str
    course_name: str
    enrolled_students: int = 0
    average_progress: float = 0.0
    average_score: float = 0.0
    completion_rate: float = 0.0
    engagement: EngagementLevel = EngagementLevel.LOW
