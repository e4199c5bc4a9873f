"""Pydantic schemas, re-exported for convenience."""

from scholardorm.schemas.common import ErrorResponse, DeletedResponse  # noqa: F401
from scholardorm.schemas.progress import (  # noqa: F401
    CourseStatus,
    EngagementLevel,
    CourseProgress,
    StudentSummary,
    ProgressStats,
    CourseRollup,
)
from scholardorm.schemas.course import (  # noqa: F401
    EnrollmentState,
    CourseOverview,
    CourseStudentRow,
    QuizStat,
    CourseAnalyticsResponse,
)
from scholardorm.schemas.student import (  # noqa: F401
    StudentStatus,
    StudentListItem,
    AttemptRow,
)
from scholardorm.schemas.admin import (  # noqa: F401
    TimeRange,
    UserStats,
    EngagementStats,
    ActivityPoint,
    CourseCompletion,
    RoleCount,
    AnalyticsResponse,
)
from scholardorm.schemas.enrollment import (  # noqa: F401
    EnrollmentPatch,
    EnrollmentRead,
)
