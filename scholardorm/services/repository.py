"""Data-fetch layer: row source → typed records.

Every read goes through ``fetch_rows``: a backend failure is logged and
turns into an empty list, so a dashboard renders its empty state rather
than an error page. Single-row lookups (the caller's user row, an
enrollment about to be written) fetch with ``strict=True`` and raise like
the writes do.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, TypeVar

from pydantic import ValidationError

from scholardorm.schemas.records import (
    ActivityRecord,
    AssignmentRecord,
    CourseRecord,
    EnrollmentRecord,
    LessonProgressRecord,
    LessonRecord,
    QuizAttemptRecord,
    QuizRecord,
    RowRecord,
    UserRecord,
)
from scholardorm.services.catalog import CourseCatalog, PlatformSnapshot, ProgressDataset
from scholardorm.services.row_source import DataSourceError, RowQuery, RowSource

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RowRecord)

USERS = "users"
COURSES = "courses"
LESSONS = "lessons"
QUIZZES = "quizzes"
ENROLLMENTS = "user_courses"
LESSON_PROGRESS = "user_progress"
QUIZ_ATTEMPTS = "quiz_attempts"
ASSIGNMENTS = "teacher_course_assignments"
ACTIVITIES = "activities"


# ── generic fetch ─────────────────────────────────────────────────────────────


def parse_rows(model: type[R], rows: Iterable[dict[str, Any]], table: str) -> list[R]:
    """Parse *rows* into *model*, dropping the ones that fail validation."""
    records: list[R] = []
    for row in rows:
        try:
            records.append(model.model_validate(row))
        except ValidationError as exc:
            logger.warning(
                "Dropping malformed %s row %s: %s",
                table,
                row.get("id", "?"),
                exc.errors(include_url=False),
            )
    return records


def fetch_rows(
    source: RowSource, query: RowQuery, model: type[R], *, strict: bool = False
) -> list[R]:
    """Fetch and parse one query.

    A ``DataSourceError`` is logged and yields ``[]`` unless *strict*, in
    which case it propagates.
    """
    try:
        rows = source.fetch(query)
    except DataSourceError as exc:
        if strict:
            raise
        logger.error("Fetch from %s failed, using empty result: %s", query.table, exc)
        return []
    return parse_rows(model, rows, query.table)


def _in(query: RowQuery, column: str, values: Iterable[str]) -> RowQuery:
    return query.where(column, "in", sorted(set(values)))


# ── users / scope ─────────────────────────────────────────────────────────────


def get_user(source: RowSource, user_id: str) -> UserRecord | None:
    rows = fetch_rows(source, RowQuery(USERS).where("id", "eq", user_id), UserRecord, strict=True)
    return rows[0] if rows else None


def get_users(source: RowSource, user_ids: Iterable[str]) -> dict[str, UserRecord]:
    ids = set(user_ids)
    if not ids:
        return {}
    users = fetch_rows(source, _in(RowQuery(USERS), "id", ids), UserRecord)
    return {u.id: u for u in users}


def teacher_course_ids(source: RowSource, teacher_id: str) -> list[str]:
    """Courses a teacher is actively assigned to, in assignment order."""
    query = (
        RowQuery(ASSIGNMENTS)
        .where("teacher_id", "eq", teacher_id)
        .where("is_active", "eq", True)
        .order_by("assigned_at")
    )
    seen: dict[str, None] = {}
    for a in fetch_rows(source, query, AssignmentRecord):
        seen.setdefault(a.course_id, None)
    return list(seen)


def all_course_ids(source: RowSource) -> list[str]:
    courses = fetch_rows(source, RowQuery(COURSES).order_by("title"), CourseRecord)
    return [c.id for c in courses]


# ── catalogue / progress ──────────────────────────────────────────────────────


def load_courses(source: RowSource, course_ids: Iterable[str]) -> list[CourseRecord]:
    """Courses in *course_ids*, ordered by title."""
    ids = set(course_ids)
    if not ids:
        return []
    return fetch_rows(source, _in(RowQuery(COURSES), "id", ids).order_by("title"), CourseRecord)


def load_catalog(source: RowSource, course_ids: Iterable[str]) -> CourseCatalog:
    """Courses, published lessons and quizzes of a course set.

    Quizzes are attached to a course either directly or through one of its
    lessons; both kinds are fetched.
    """
    ids = set(course_ids)
    if not ids:
        return CourseCatalog()

    courses = load_courses(source, ids)
    lessons = fetch_rows(
        source,
        _in(RowQuery(LESSONS), "course_id", ids)
        .where("is_published", "eq", True)
        .order_by("order_index"),
        LessonRecord,
    )
    quizzes = fetch_rows(source, _in(RowQuery(QUIZZES), "course_id", ids), QuizRecord)
    lesson_ids = {l.id for l in lessons}
    if lesson_ids:
        known = {q.id for q in quizzes}
        quizzes += [
            q
            for q in fetch_rows(source, _in(RowQuery(QUIZZES), "lesson_id", lesson_ids), QuizRecord)
            if q.id not in known
        ]
    return CourseCatalog.build(courses, lessons, quizzes)


def load_progress_dataset(source: RowSource, course_ids: Iterable[str]) -> ProgressDataset:
    """Everything the progress views need for one course set."""
    catalog = load_catalog(source, course_ids)
    if not catalog.courses:
        return ProgressDataset(catalog=catalog)

    enrollments = fetch_rows(
        source,
        _in(RowQuery(ENROLLMENTS), "course_id", catalog.courses).order_by("enrolled_at"),
        EnrollmentRecord,
    )
    student_ids = {e.user_id for e in enrollments}
    if not student_ids:
        return ProgressDataset(catalog=catalog)

    lesson_progress: list[LessonProgressRecord] = []
    if catalog.lessons:
        lesson_progress = fetch_rows(
            source,
            _in(_in(RowQuery(LESSON_PROGRESS), "user_id", student_ids), "lesson_id", catalog.lessons),
            LessonProgressRecord,
        )
    attempts: list[QuizAttemptRecord] = []
    if catalog.quizzes:
        attempts = fetch_rows(
            source,
            _in(_in(RowQuery(QUIZ_ATTEMPTS), "user_id", student_ids), "quiz_id", catalog.quizzes)
            .order_by("completed_at", descending=True),
            QuizAttemptRecord,
        )
    return ProgressDataset(
        catalog=catalog,
        enrollments=enrollments,
        users=get_users(source, student_ids),
        lesson_progress=lesson_progress,
        attempts=attempts,
    )


def load_course_detail(source: RowSource, course_id: str) -> ProgressDataset:
    return load_progress_dataset(source, [course_id])


# ── platform snapshot ─────────────────────────────────────────────────────────


def load_platform_snapshot(source: RowSource, since: datetime) -> PlatformSnapshot:
    """Rows for the admin analytics page.

    Users, enrollments and courses are fetched whole since totals and the
    previous-window trends need them; activities and quiz attempts only
    from *since* on.
    """
    return PlatformSnapshot(
        users=fetch_rows(source, RowQuery(USERS), UserRecord),
        courses=fetch_rows(source, RowQuery(COURSES).order_by("title"), CourseRecord),
        enrollments=fetch_rows(source, RowQuery(ENROLLMENTS), EnrollmentRecord),
        activities=fetch_rows(
            source,
            RowQuery(ACTIVITIES).where("created_at", "gte", since).order_by("created_at"),
            ActivityRecord,
        ),
        attempts=fetch_rows(
            source,
            RowQuery(QUIZ_ATTEMPTS).where("completed_at", "gte", since),
            QuizAttemptRecord,
        ),
    )


# ── enrollments (writes) ──────────────────────────────────────────────────────


def get_enrollment(source: RowSource, enrollment_id: str) -> EnrollmentRecord | None:
    rows = fetch_rows(
        source, RowQuery(ENROLLMENTS).where("id", "eq", enrollment_id), EnrollmentRecord, strict=True
    )
    return rows[0] if rows else None


def update_enrollment(
    source: RowSource, enrollment_id: str, patch: dict[str, Any]
) -> EnrollmentRecord:
    """Apply *patch* to one enrollment. Raises ``RowNotFoundError`` / ``DataSourceError``."""
    row = source.update(ENROLLMENTS, enrollment_id, patch)
    logger.info("Updated enrollment %s: %s", enrollment_id, sorted(patch))
    return EnrollmentRecord.model_validate(row)


def delete_enrollment(source: RowSource, enrollment_id: str) -> None:
    source.delete(ENROLLMENTS, enrollment_id)
    logger.info("Deleted enrollment %s", enrollment_id)
