"""Unit tests for single-course analytics."""

from datetime import datetime, timedelta, timezone

from scholardorm.schemas.course import EnrollmentState
from scholardorm.schemas.records import (
    CourseRecord,
    EnrollmentRecord,
    LessonProgressRecord,
    LessonRecord,
    QuizAttemptRecord,
    QuizRecord,
    UserRecord,
)
from scholardorm.services.catalog import CourseCatalog, ProgressDataset
from scholardorm.services.course_analytics import course_analytics

NOW = datetime(2024, 5, 20, 12, 0, tzinfo=timezone.utc)


def _dataset() -> ProgressDataset:
    catalog = CourseCatalog.build(
        [CourseRecord(id="c1", title="Geography", description="Maps")],
        [LessonRecord(id="l1", course_id="c1"), LessonRecord(id="l2", course_id="c1")],
        [
            QuizRecord(id="q1", course_id="c1", title="Capitals"),
            QuizRecord(id="q2", lesson_id="l2", title="Rivers", passing_score=50),
        ],
    )
    return ProgressDataset(
        catalog=catalog,
        enrollments=[
            EnrollmentRecord(
                id="e1", user_id="s1", course_id="c1", progress_percentage=100,
                completed=True, last_accessed=NOW - timedelta(days=1),
            ),
            EnrollmentRecord(
                id="e2", user_id="s2", course_id="c1", progress_percentage=40,
                last_accessed=NOW - timedelta(days=2),
            ),
            EnrollmentRecord(
                id="e3", user_id="s3", course_id="c1", progress_percentage=0,
                last_accessed=NOW - timedelta(days=40),
            ),
        ],
        users={"s1": UserRecord(id="s1", full_name="Ada", email="ada@ex.com")},
        lesson_progress=[
            LessonProgressRecord(user_id="s1", lesson_id="l1", completed=True, time_spent_seconds=600),
            LessonProgressRecord(user_id="s1", lesson_id="l2", completed=True, time_spent_seconds=300),
            LessonProgressRecord(user_id="s2", lesson_id="l1", completed=True, time_spent_seconds=120),
        ],
        attempts=[
            QuizAttemptRecord(user_id="s1", quiz_id="q1", percentage=90, time_spent_seconds=120),
            QuizAttemptRecord(user_id="s2", quiz_id="q1", percentage=60, time_spent_seconds=240),
            QuizAttemptRecord(user_id="s2", quiz_id="q2", percentage=55, time_spent_seconds=60),
        ],
    )


def test_course_header():
    course = course_analytics("c1", _dataset(), NOW).course
    assert course.title == "Geography"
    assert course.description == "Maps"
    assert course.total_students == 3
    assert course.active_students == 2
    assert course.completion_rate == 33.33
    assert course.average_progress == 46.67
    assert course.total_lessons == 2
    assert course.total_quizzes == 2
    assert course.total_time_spent == 17  # (600 + 300 + 120) s
    assert course.engagement_score == 66.67
    assert course.last_activity == NOW - timedelta(days=1)


def test_student_rows():
    rows = {r.id: r for r in course_analytics("c1", _dataset(), NOW).students}
    assert rows["s1"].name == "Ada"
    assert rows["s1"].status == EnrollmentState.COMPLETED
    assert rows["s1"].completed_lessons == 2
    assert rows["s1"].time_spent == 15
    assert rows["s2"].status == EnrollmentState.ACTIVE
    assert rows["s2"].quiz_scores == [60, 55]
    assert rows["s2"].average_quiz_score == 57.5
    assert rows["s3"].status == EnrollmentState.INACTIVE
    assert rows["s3"].name == "Unknown"
    assert rows["s3"].average_quiz_score == 0.0


def test_quiz_stats_use_each_quiz_passing_score():
    quizzes = {q.id: q for q in course_analytics("c1", _dataset(), NOW).quizzes}
    assert quizzes["q1"].attempts == 2
    assert quizzes["q1"].average_score == 75.0
    assert quizzes["q1"].pass_rate == 50.0  # 90 passes the default 70, 60 does not
    assert quizzes["q1"].average_time_spent == 3.0
    assert quizzes["q2"].pass_rate == 100.0  # 55 ≥ 50


def test_empty_course():
    result = course_analytics("c1", ProgressDataset(), NOW)
    assert result.course.title == "Unknown Course"
    assert result.course.total_students == 0
    assert result.course.completion_rate == 0.0
    assert result.students == []
    assert result.quizzes == []


def test_repeated_completion_row_adds_time_once():
    dataset = _dataset()
    dataset.lesson_progress.append(
        LessonProgressRecord(user_id="s2", lesson_id="l1", completed=True, time_spent_seconds=120)
    )
    result = course_analytics("c1", dataset, NOW)
    rows = {r.id: r for r in result.students}
    assert rows["s2"].completed_lessons == 1
    assert rows["s2"].time_spent == 2
    assert result.course.total_time_spent == 17
