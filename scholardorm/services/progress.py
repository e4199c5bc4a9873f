"""Per-student progress aggregation for the teacher dashboards.

Folds enrollment, lesson-progress and quiz-attempt rows (already limited
to one teacher's course set) into one ``StudentSummary`` per student:

  course progress   = completed published lessons / published lessons × 100
                      (0 for a course without published lessons)
  course score      = mean attempt percentage on the course's quizzes
                      (0 without attempts)
  overall progress  = unweighted mean of course progress over all enrollments
  average score     = mean course score over courses with at least one attempt
  time spent        = seconds on distinct completed lessons, floored to minutes
  completed courses = course progress ≥ 80

Everything here is pure: same rows in, same summaries out.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Iterable, Mapping

from scholardorm.schemas.progress import (
    CourseProgress,
    CourseStatus,
    ProgressStats,
    StudentSummary,
)
from scholardorm.schemas.records import (
    EnrollmentRecord,
    LessonProgressRecord,
    QuizAttemptRecord,
    UserRecord,
)
from scholardorm.services.catalog import CourseCatalog

COMPLETION_THRESHOLD = 80.0
UNKNOWN_STUDENT = "Unknown"


# ── helpers ───────────────────────────────────────────────────────────────────


def mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def course_progress(completed_lessons: int, total_lessons: int) -> float:
    """Percentage of a course's published lessons completed."""
    if total_lessons <= 0:
        return 0.0
    return completed_lessons * 100 / total_lessons


def is_completed(progress: float) -> bool:
    return progress >= COMPLETION_THRESHOLD


def _latest(*candidates: datetime | None) -> datetime | None:
    return max((c for c in candidates if c is not None), default=None)


def _strengths(score: float, streak: int, progress: float) -> list[str]:
    strengths = []
    if score > 85:
        strengths.append("High Test Performance")
    if streak > 7:
        strengths.append("Consistent Learning")
    if progress > 80:
        strengths.append("Fast Progress")
    return strengths or ["Enrolled Student"]


def _improvements(score: float, streak: int, progress: float) -> list[str]:
    improvements = []
    if score < 70:
        improvements.append("Quiz Performance")
    if progress < 50:
        improvements.append("Course Progress")
    if streak < 3:
        improvements.append("Consistency")
    return improvements


# ── aggregation ───────────────────────────────────────────────────────────────


def summarize_students(
    enrollments: Iterable[EnrollmentRecord],
    lesson_progress: Iterable[LessonProgressRecord],
    attempts: Iterable[QuizAttemptRecord],
    catalog: CourseCatalog,
    users: Mapping[str, UserRecord] | None = None,
) -> list[StudentSummary]:
    """Return one summary per distinct student in *enrollments*.

    Students appear in the order their first enrollment appears. A student
    enrolled twice in the same course is counted once for that course.
    """
    users = users or {}

    by_student: dict[str, dict[str, EnrollmentRecord]] = {}
    for e in enrollments:
        by_student.setdefault(e.user_id, {}).setdefault(e.course_id, e)

    completed: dict[tuple[str, str], set[str]] = defaultdict(set)
    seconds: dict[tuple[str, str], float] = defaultdict(float)
    last_lesson: dict[str, datetime] = {}
    for lp in lesson_progress:
        if not lp.completed:
            continue
        course_id = catalog.lesson_course(lp.lesson_id)
        if course_id is None:
            continue
        key = (lp.user_id, course_id)
        if lp.lesson_id not in completed[key]:
            completed[key].add(lp.lesson_id)
            seconds[key] += lp.time_spent_seconds
        if lp.completed_at is not None:
            last_lesson[lp.user_id] = _latest(last_lesson.get(lp.user_id), lp.completed_at)

    scores: dict[tuple[str, str], list[float]] = defaultdict(list)
    last_attempt: dict[str, datetime] = {}
    for a in attempts:
        course_id = catalog.quiz_course(a.quiz_id)
        if course_id is None:
            continue
        scores[(a.user_id, course_id)].append(a.percentage)
        if a.completed_at is not None:
            last_attempt[a.user_id] = _latest(last_attempt.get(a.user_id), a.completed_at)

    summaries: list[StudentSummary] = []
    for student_id, student_enrollments in by_student.items():
        courses: list[CourseProgress] = []
        raw_progress: list[float] = []
        total_seconds = 0.0

        for course_id, e in student_enrollments.items():
            key = (student_id, course_id)
            done = len(completed.get(key, ()))
            total = catalog.published_lessons(course_id)
            progress = course_progress(done, total)
            course_scores = scores.get(key, [])
            course_seconds = seconds.get(key, 0.0)
            total_seconds += course_seconds
            raw_progress.append(progress)

            if is_completed(progress):
                status = CourseStatus.COMPLETED
            elif done == 0 and not course_scores:
                status = CourseStatus.NOT_STARTED
            else:
                status = CourseStatus.IN_PROGRESS

            courses.append(
                CourseProgress(
                    course_id=course_id,
                    course_name=catalog.title(course_id),
                    progress=round(progress, 2),
                    lessons_completed=done,
                    total_lessons=total,
                    average_score=round(mean(course_scores), 2),
                    quiz_attempts=len(course_scores),
                    time_spent=int(course_seconds // 60),
                    last_accessed=e.last_accessed,
                    status=status,
                )
            )

        overall = mean(raw_progress)
        average_score = mean(
            mean(scores[(student_id, c.course_id)]) for c in courses if c.quiz_attempts
        )

        accessed = [e for e in student_enrollments.values() if e.last_accessed is not None]
        current = (
            max(accessed, key=lambda e: e.last_accessed)
            if accessed
            else next(iter(student_enrollments.values()))
        )

        user = users.get(student_id)
        streak = user.streak_count if user is not None else 0
        summaries.append(
            StudentSummary(
                id=student_id,
                name=(user.full_name if user is not None else "") or UNKNOWN_STUDENT,
                email=user.email if user is not None else "",
                avatar=user.avatar_url if user is not None else "",
                streak=streak,
                total_courses=len(courses),
                completed_courses=sum(1 for p in raw_progress if is_completed(p)),
                current_course=catalog.title(current.course_id),
                overall_progress=round(overall, 2),
                average_score=round(average_score, 2),
                time_spent=int(total_seconds // 60),
                last_active=_latest(
                    *(e.last_accessed for e in student_enrollments.values()),
                    last_lesson.get(student_id),
                    last_attempt.get(student_id),
                ),
                strengths=_strengths(average_score, streak, overall),
                improvements=_improvements(average_score, streak, overall),
                course_progress=courses,
            )
        )
    return summaries


def is_active(summary: StudentSummary, now: datetime, window_days: int) -> bool:
    return summary.last_active is not None and summary.last_active > now - timedelta(
        days=window_days
    )


def progress_stats(
    summaries: Iterable[StudentSummary], now: datetime, window_days: int = 7
) -> ProgressStats:
    """Headline numbers over a set of student summaries."""
    summaries = list(summaries)
    if not summaries:
        return ProgressStats()

    total_courses = sum(s.total_courses for s in summaries)
    completed_courses = sum(s.completed_courses for s in summaries)
    return ProgressStats(
        total_students=len(summaries),
        active_students=sum(1 for s in summaries if is_active(s, now, window_days)),
        average_progress=round(mean(s.overall_progress for s in summaries), 2),
        average_score=round(mean(s.average_score for s in summaries), 2),
        total_time_spent=sum(s.time_spent for s in summaries),
        completion_rate=(
            round(completed_courses * 100 / total_courses, 2) if total_courses else 0.0
        ),
    )
