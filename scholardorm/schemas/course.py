"""Single-course analytics schemas."""

import enum
from datetime import datetime

from pydantic import BaseModel


class EnrollmentState(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"


class CourseOverview(BaseModel):
    id: str
    title: str
    description: str = ""
    total_students: int = 0
    active_students: int = 0
    completion_rate: float = 0.0
    average_progress: float = 0.0
    total_lessons: int = 0
    total_quizzes: int = 0
    total_time_spent: int = 0  # minutes
    engagement_score: float = 0.0
    last_activity: datetime | None = None


class CourseStudentRow(BaseModel):
    id: str
    name: str
    email: str = ""
    avatar: str = ""
    progress: float = 0.0
    completed_lessons: int = 0
    total_lessons: int = 0
    last_active: datetime | None = None
    time_spent: int = 0  # minutes
    quiz_scores: list[float] = []
    average_quiz_score: float = 0.0
    status: EnrollmentState = EnrollmentState.INACTIVE


class QuizStat(BaseModel):
    id: str
    title: str
    attempts: int = 0
    average_score: float = 0.0
    pass_rate: float = 0.0
    average_time_spent: float = 0.0  # minutes


class CourseAnalyticsResponse(BaseModel):
    course: CourseOverview
    students: list[CourseStudentRow] = []
    quizzes: list[QuizStat] = []
