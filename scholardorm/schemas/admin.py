"""Admin dashboard schemas: platform-wide analytics."""

import enum
from datetime import datetime

from pydantic import BaseModel


class TimeRange(str, enum.Enum):
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class UserStats(BaseModel):
    total_users: int = 0
    active_users: int = 0
    new_users: int = 0
    new_users_trend: float = 0.0


class EngagementStats(BaseModel):
    total_enrollments: int = 0
    enrollments_trend: float = 0.0
    course_completions: int = 0
    completions_trend: float = 0.0
    quiz_attempts: int = 0
    average_score: float = 0.0


class ActivityPoint(BaseModel):
    """Single data-point on the activity chart."""

    date: str  # ISO date string  YYYY-MM-DD
    logins: int = 0
    enrollments: int = 0
    completions: int = 0


class CourseCompletion(BaseModel):
    course_id: str
    name: str
    enrollments: int = 0
    completion: float = 0.0


class RoleCount(BaseModel):
    name: str
    value: int = 0


class AnalyticsResponse(BaseModel):
    """Full analytics payload."""

    time_range: TimeRange
    window_start: datetime
    users: UserStats
    engagement: EngagementStats
    activity: list[ActivityPoint] = []
    course_completion: list[CourseCompletion] = []
    user_types: list[RoleCount] = []
