"""Unit tests for platform-wide admin analytics."""

from datetime import datetime, timedelta, timezone

import pytest

from scholardorm.schemas.admin import TimeRange
from scholardorm.schemas.records import (
    ActivityRecord,
    CourseRecord,
    EnrollmentRecord,
    QuizAttemptRecord,
    UserRecord,
)
from scholardorm.services.activity import (
    activity_by_date,
    course_completion,
    platform_analytics,
    role_distribution,
    trend,
    user_stats,
    window_bounds,
)
from scholardorm.services.catalog import PlatformSnapshot

NOW = datetime(2024, 5, 20, 12, 0, tzinfo=timezone.utc)


def _days_ago(n: float) -> datetime:
    return NOW - timedelta(days=n)


@pytest.mark.parametrize(
    "time_range,days",
    [(TimeRange.WEEK, 7), (TimeRange.MONTH, 30), (TimeRange.QUARTER, 90), (TimeRange.YEAR, 365)],
)
def test_window_bounds(time_range, days):
    previous_start, start = window_bounds(time_range, NOW)
    assert start == _days_ago(days)
    assert previous_start == _days_ago(2 * days)


def test_trend():
    assert trend(15, 10) == 50.0
    assert trend(5, 10) == -50.0
    assert trend(7, 0) == 0.0


def test_activity_by_date_groups_and_sorts():
    activities = [
        ActivityRecord(activity_type="login", created_at=datetime(2024, 5, 19, 23, 59, tzinfo=timezone.utc)),
        ActivityRecord(activity_type="course_completed", created_at=datetime(2024, 5, 18, 8, tzinfo=timezone.utc)),
        ActivityRecord(activity_type="login", created_at=datetime(2024, 5, 19, 1, tzinfo=timezone.utc)),
        ActivityRecord(activity_type="course_progress", created_at=datetime(2024, 5, 19, 9, tzinfo=timezone.utc)),
        ActivityRecord(activity_type="forum_post", created_at=datetime(2024, 5, 17, 9, tzinfo=timezone.utc)),
    ]
    points = activity_by_date(activities)
    assert [p.date for p in points] == ["2024-05-18", "2024-05-19"]
    assert points[0].completions == 1
    assert points[1].logins == 2
    assert points[1].enrollments == 1


def test_activity_by_date_empty():
    assert activity_by_date([]) == []


def test_user_stats():
    users = [
        UserRecord(id="1", created_at=_days_ago(3), last_login=_days_ago(1)),
        UserRecord(id="2", created_at=_days_ago(5)),
        UserRecord(id="3", created_at=_days_ago(10), last_login=_days_ago(9)),
        UserRecord(id="4", created_at=_days_ago(100)),
    ]
    previous_start, start = window_bounds(TimeRange.WEEK, NOW)
    stats = user_stats(users, start, previous_start)
    assert stats.total_users == 4
    assert stats.active_users == 1
    assert stats.new_users == 2
    assert stats.new_users_trend == 100.0


def test_course_completion_and_roles():
    courses = [CourseRecord(id="c1", title="Art"), CourseRecord(id="c2", title="Zoology")]
    enrollments = [
        EnrollmentRecord(user_id="a", course_id="c1", completed=True),
        EnrollmentRecord(user_id="b", course_id="c1"),
        EnrollmentRecord(user_id="c", course_id="c1"),
    ]
    rates = course_completion(courses, enrollments)
    assert [(r.name, r.enrollments, r.completion) for r in rates] == [("Art", 3, 33), ("Zoology", 0, 0)]

    roles = role_distribution(
        [UserRecord(id="1"), UserRecord(id="2", role="teacher"), UserRecord(id="3")]
    )
    assert {r.name: r.value for r in roles} == {"Students": 2, "Teachers": 1}


def test_platform_analytics():
    snapshot = PlatformSnapshot(
        users=[UserRecord(id="1", created_at=_days_ago(2), last_login=_days_ago(1))],
        courses=[CourseRecord(id="c1", title="Art")],
        enrollments=[
            EnrollmentRecord(user_id="1", course_id="c1", enrolled_at=_days_ago(3)),
            EnrollmentRecord(
                user_id="1", course_id="c1", enrolled_at=_days_ago(10),
                completed=True, completion_date=_days_ago(1),
            ),
        ],
        activities=[ActivityRecord(user_id="1", activity_type="login", created_at=_days_ago(1))],
        attempts=[
            QuizAttemptRecord(user_id="1", quiz_id="q", percentage=80, completed_at=_days_ago(1)),
            QuizAttemptRecord(user_id="1", quiz_id="q", percentage=60, completed_at=_days_ago(2)),
        ],
    )
    result = platform_analytics(snapshot, TimeRange.WEEK, NOW)
    assert result.window_start == _days_ago(7)
    assert result.users.new_users == 1
    assert result.engagement.total_enrollments == 2
    assert result.engagement.enrollments_trend == 0.0  # one this week, one the week before
    assert result.engagement.course_completions == 1
    assert result.engagement.quiz_attempts == 2
    assert result.engagement.average_score == 70.0
    assert len(result.activity) == 1
    assert result.course_completion[0].completion == 50


def test_platform_analytics_on_empty_snapshot():
    result = platform_analytics(PlatformSnapshot(), TimeRange.MONTH, NOW)
    assert result.users.total_users == 0
    assert result.activity == []
    assert result.course_completion == []
    assert result.user_types == []


def test_offset_timestamps_are_bucketed_by_utc_date():
    activity = ActivityRecord.model_validate(
        {"activity_type": "login", "created_at": "2024-05-20T01:30:00+02:00"}
    )
    assert activity.created_at == datetime(2024, 5, 19, 23, 30, tzinfo=timezone.utc)
    assert activity.created_at.utcoffset() == timedelta(0)
    assert [p.date for p in activity_by_date([activity])] == ["2024-05-19"]
