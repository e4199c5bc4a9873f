"""Platform-wide analytics for the admin dashboard."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable

from scholardorm.schemas.admin import (
    ActivityPoint,
    AnalyticsResponse,
    CourseCompletion,
    EngagementStats,
    RoleCount,
    TimeRange,
    UserStats,
)
from scholardorm.schemas.records import (
    ActivityRecord,
    CourseRecord,
    EnrollmentRecord,
    QuizAttemptRecord,
    UserRecord,
)
from scholardorm.services.catalog import UNKNOWN_COURSE, PlatformSnapshot
from scholardorm.services.progress import mean

WINDOW_DAYS = {
    TimeRange.WEEK: 7,
    TimeRange.MONTH: 30,
    TimeRange.QUARTER: 90,
    TimeRange.YEAR: 365,
}

# activity_type → ActivityPoint field
ACTIVITY_FIELDS = {
    "login": "logins",
    "course_progress": "enrollments",
    "course_completed": "completions",
}


def window_bounds(time_range: TimeRange, now: datetime) -> tuple[datetime, datetime]:
    """Return ``(previous_start, start)``; the current window is ``[start, now]``."""
    length = timedelta(days=WINDOW_DAYS[time_range])
    start = now - length
    return start - length, start


def trend(current: int, previous: int) -> float:
    """Percent change against the previous window, 0 when there is nothing to compare."""
    if previous <= 0:
        return 0.0
    return round((current - previous) * 100 / previous, 2)


def _count_between(
    stamps: Iterable[datetime | None], start: datetime, end: datetime | None = None
) -> int:
    return sum(
        1 for s in stamps if s is not None and s >= start and (end is None or s < end)
    )


# ── sections ──────────────────────────────────────────────────────────────────


def user_stats(
    users: list[UserRecord], start: datetime, previous_start: datetime
) -> UserStats:
    new_users = _count_between((u.created_at for u in users), start)
    previous = _count_between((u.created_at for u in users), previous_start, start)
    return UserStats(
        total_users=len(users),
        active_users=_count_between((u.last_login for u in users), start),
        new_users=new_users,
        new_users_trend=trend(new_users, previous),
    )


def engagement_stats(
    enrollments: list[EnrollmentRecord],
    attempts: list[QuizAttemptRecord],
    start: datetime,
    previous_start: datetime,
) -> EngagementStats:
    completed = [e for e in enrollments if e.completed]
    return EngagementStats(
        total_enrollments=len(enrollments),
        enrollments_trend=trend(
            _count_between((e.enrolled_at for e in enrollments), start),
            _count_between((e.enrolled_at for e in enrollments), previous_start, start),
        ),
        course_completions=len(completed),
        completions_trend=trend(
            _count_between((e.completion_date for e in completed), start),
            _count_between((e.completion_date for e in completed), previous_start, start),
        ),
        quiz_attempts=len(attempts),
        average_score=round(mean(a.percentage for a in attempts), 2),
    )


def activity_by_date(activities: Iterable[ActivityRecord]) -> list[ActivityPoint]:
    """Count tracked activity types per UTC calendar day, oldest day first.

    Days with only untracked activity types do not appear.
    """
    days: dict[str, Counter] = {}
    for a in activities:
        field = ACTIVITY_FIELDS.get(a.activity_type)
        if field is None:
            continue
        days.setdefault(a.created_at.date().isoformat(), Counter())[field] += 1
    return [ActivityPoint(date=day, **counts) for day, counts in sorted(days.items())]


def course_completion(
    courses: Iterable[CourseRecord], enrollments: Iterable[EnrollmentRecord]
) -> list[CourseCompletion]:
    """Completion percentage per course (``completed`` flag), in course order."""
    totals: Counter = Counter()
    done: Counter = Counter()
    for e in enrollments:
        totals[e.course_id] += 1
        if e.completed:
            done[e.course_id] += 1
    return [
        CourseCompletion(
            course_id=c.id,
            name=c.title or UNKNOWN_COURSE,
            enrollments=totals[c.id],
            completion=round(done[c.id] * 100 / totals[c.id]) if totals[c.id] else 0,
        )
        for c in courses
    ]


def role_distribution(users: Iterable[UserRecord]) -> list[RoleCount]:
    """User count per role, labelled in the plural ("Students", "Teachers")."""
    counts = Counter((u.role or "unknown") for u in users)
    return [RoleCount(name=role.capitalize() + "s", value=n) for role, n in counts.items()]


def platform_analytics(
    snapshot: PlatformSnapshot, time_range: TimeRange, now: datetime
) -> AnalyticsResponse:
    previous_start, start = window_bounds(time_range, now)
    return AnalyticsResponse(
        time_range=time_range,
        window_start=start,
        users=user_stats(snapshot.users, start, previous_start),
        engagement=engagement_stats(
            snapshot.enrollments,
            [a for a in snapshot.attempts if a.completed_at is not None and a.completed_at >= start],
            start,
            previous_start,
        ),
        activity=activity_by_date(a for a in snapshot.activities if a.created_at >= start),
        course_completion=course_completion(snapshot.courses, snapshot.enrollments),
        user_types=role_distribution(snapshot.users),
    )
