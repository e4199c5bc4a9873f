"""Analytics for a single course: header numbers, student rows, quiz stats."""

from collections import defaultdict
from datetime import datetime, timedelta

from scholardorm.schemas.course import (
    CourseAnalyticsResponse,
    CourseOverview,
    CourseStudentRow,
    EnrollmentState,
    QuizStat,
)
from scholardorm.schemas.records import EnrollmentRecord
from scholardorm.services.catalog import ProgressDataset
from scholardorm.services.progress import UNKNOWN_STUDENT, mean


def _recent(e: EnrollmentRecord, since: datetime) -> bool:
    return e.last_accessed is not None and e.last_accessed > since


def course_analytics(
    course_id: str,
    dataset: ProgressDataset,
    now: datetime,
    window_days: int = 7,
) -> CourseAnalyticsResponse:
    """Build the course page from one dataset fetched for *course_id*.

    Header progress and completion use the stored enrollment fields
    (``progress_percentage`` and the ``completed`` flag), not the
    lesson-derived progress of the teacher overview.
    """
    catalog = dataset.catalog
    since = now - timedelta(days=window_days)

    enrollments: dict[str, EnrollmentRecord] = {}
    for e in dataset.enrollments:
        if e.course_id == course_id:
            enrollments.setdefault(e.user_id, e)

    total_lessons = catalog.published_lessons(course_id)
    quizzes = catalog.course_quizzes(course_id)
    quiz_ids = {q.id for q in quizzes}

    done: dict[str, set[str]] = defaultdict(set)
    seconds: dict[str, float] = defaultdict(float)
    for lp in dataset.lesson_progress:
        if lp.completed and catalog.lesson_course(lp.lesson_id) == course_id:
            if lp.lesson_id not in done[lp.user_id]:
                done[lp.user_id].add(lp.lesson_id)
                seconds[lp.user_id] += lp.time_spent_seconds

    attempts = [a for a in dataset.attempts if a.quiz_id in quiz_ids]
    scores: dict[str, list[float]] = defaultdict(list)
    for a in attempts:
        scores[a.user_id].append(a.percentage)

    students: list[CourseStudentRow] = []
    for student_id, e in enrollments.items():
        user = dataset.users.get(student_id)
        if e.completed:
            state = EnrollmentState.COMPLETED
        elif _recent(e, since):
            state = EnrollmentState.ACTIVE
        else:
            state = EnrollmentState.INACTIVE
        students.append(
            CourseStudentRow(
                id=student_id,
                name=(user.full_name if user is not None else "") or UNKNOWN_STUDENT,
                email=user.email if user is not None else "",
                avatar=user.avatar_url if user is not None else "",
                progress=round(e.progress_percentage, 2),
                completed_lessons=len(done.get(student_id, ())),
                total_lessons=total_lessons,
                last_active=e.last_accessed,
                time_spent=int(seconds.get(student_id, 0.0) // 60),
                quiz_scores=scores.get(student_id, []),
                average_quiz_score=round(mean(scores.get(student_id, [])), 2),
                status=state,
            )
        )

    quiz_stats: list[QuizStat] = []
    for quiz in quizzes:
        quiz_attempts = [a for a in attempts if a.quiz_id == quiz.id]
        n = len(quiz_attempts)
        passed = sum(1 for a in quiz_attempts if a.percentage >= quiz.passing_score)
        quiz_stats.append(
            QuizStat(
                id=quiz.id,
                title=quiz.title or "Untitled Quiz",
                attempts=n,
                average_score=round(mean(a.percentage for a in quiz_attempts), 2),
                pass_rate=round(passed * 100 / n, 2) if n else 0.0,
                average_time_spent=(
                    round(sum(a.time_spent_seconds for a in quiz_attempts) / n / 60, 2)
                    if n
                    else 0.0
                ),
            )
        )

    total = len(enrollments)
    active = sum(1 for e in enrollments.values() if _recent(e, since))
    completed = sum(1 for e in enrollments.values() if e.completed)
    course = catalog.courses.get(course_id)
    overview = CourseOverview(
        id=course_id,
        title=catalog.title(course_id),
        description=course.description if course is not None else "",
        total_students=total,
        active_students=active,
        completion_rate=round(completed * 100 / total, 2) if total else 0.0,
        average_progress=round(mean(e.progress_percentage for e in enrollments.values()), 2),
        total_lessons=total_lessons,
        total_quizzes=len(quizzes),
        total_time_spent=int(sum(seconds.values()) // 60),
        engagement_score=round(active * 100 / total, 2) if total else 0.0,
        last_activity=max(
            (e.last_accessed for e in enrollments.values() if e.last_accessed is not None),
            default=None,
        ),
    )
    return CourseAnalyticsResponse(course=overview, students=students, quizzes=quiz_stats)
