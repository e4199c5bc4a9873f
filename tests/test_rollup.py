"""Unit tests for the per-course rollup."""

from scholardorm.schemas.progress import EngagementLevel
from scholardorm.schemas.records import (
    CourseRecord,
    EnrollmentRecord,
    LessonProgressRecord,
    LessonRecord,
    QuizAttemptRecord,
    QuizRecord,
)
from scholardorm.services.catalog import CourseCatalog
from scholardorm.services.progress import summarize_students
from scholardorm.services.rollup import engagement_level, rollup_courses


def _done(student: str, lesson: str) -> LessonProgressRecord:
    return LessonProgressRecord(user_id=student, lesson_id=lesson, completed=True)


def test_engagement_buckets():
    assert engagement_level(80) == EngagementLevel.HIGH
    assert engagement_level(79.9) == EngagementLevel.MEDIUM
    assert engagement_level(50) == EngagementLevel.MEDIUM
    assert engagement_level(49.9) == EngagementLevel.LOW


def test_rollup_over_summaries():
    courses = [
        CourseRecord(id="c1", title="Maths"),
        CourseRecord(id="c2", title="History"),
        CourseRecord(id="c3", title="Empty"),
    ]
    catalog = CourseCatalog.build(
        courses,
        [LessonRecord(id=f"c1-l{i}", course_id="c1") for i in range(5)]
        + [LessonRecord(id=f"c2-l{i}", course_id="c2") for i in range(2)],
        [QuizRecord(id="q1", course_id="c1")],
    )
    summaries = summarize_students(
        [
            EnrollmentRecord(user_id="s1", course_id="c1"),
            EnrollmentRecord(user_id="s2", course_id="c1"),
            EnrollmentRecord(user_id="s1", course_id="c2"),
        ],
        [_done("s1", f"c1-l{i}") for i in range(5)]
        + [_done("s2", "c1-l0"), _done("s2", "c1-l1"), _done("s1", "c2-l0")],
        [
            QuizAttemptRecord(user_id="s1", quiz_id="q1", percentage=90),
            QuizAttemptRecord(user_id="s1", quiz_id="q1", percentage=70),
        ],
        catalog,
    )
    rollups = {r.course_id: r for r in rollup_courses(summaries, courses)}

    maths = rollups["c1"]
    assert maths.enrolled_students == 2
    assert maths.average_progress == 70.0  # (100 + 40) / 2
    assert maths.average_score == 80.0  # only s1 attempted
    assert maths.completion_rate == 50.0
    assert maths.engagement == EngagementLevel.MEDIUM

    history = rollups["c2"]
    assert history.enrolled_students == 1
    assert history.average_progress == 50.0
    assert history.average_score == 0.0
    assert history.completion_rate == 0.0

    empty = rollups["c3"]
    assert empty.enrolled_students == 0
    assert empty.average_progress == 0.0
    assert empty.completion_rate == 0.0
    assert empty.engagement == EngagementLevel.LOW


def test_rollup_keeps_roster_order_and_titles():
    courses = [CourseRecord(id="b", title="Beta"), CourseRecord(id="a")]
    rollups = rollup_courses([], courses)
    assert [r.course_id for r in rollups] == ["b", "a"]
    assert rollups[1].course_name == "Unknown Course"
