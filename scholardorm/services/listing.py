"""Search, filter, sort and paginate collections already held in memory.

None of these functions mutate their input; each returns a new list.
Sorting is stable, so ties keep the order they arrived in (also when
sorting descending).
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence, TypeVar

from scholardorm.schemas.progress import StudentSummary
from scholardorm.schemas.records import QuizAttemptRecord, UserRecord
from scholardorm.schemas.student import AttemptRow, StudentListItem, StudentStatus
from scholardorm.services.catalog import UNKNOWN_COURSE, CourseCatalog
from scholardorm.services.progress import is_active

T = TypeVar("T")

STRUGGLING_PROGRESS = 30.0
UNKNOWN_QUIZ = "Unknown Quiz"
UNKNOWN_STUDENT = "Unknown Student"


class ProgressBand(str, enum.Enum):
    ALL = "all"
    HIGH = "high"  # ≥ 80
    MEDIUM = "medium"  # 50 – 80
    LOW = "low"  # < 50


class ScoreBand(str, enum.Enum):
    ALL = "all"
    HIGH = "high"  # ≥ 80
    MEDIUM = "medium"  # 60 – 80
    LOW = "low"  # < 60


class SortKey(str, enum.Enum):
    NAME = "name"
    PROGRESS = "progress"
    SCORE = "score"
    LAST_ACTIVE = "last_active"


# Names read best A→Z; everything else best-first.
DEFAULT_DESCENDING = {
    SortKey.NAME: False,
    SortKey.PROGRESS: True,
    SortKey.SCORE: True,
    SortKey.LAST_ACTIVE: True,
}


# ── search / filter ───────────────────────────────────────────────────────────


def search(items: Iterable[T], term: str | None, fields: Sequence[str]) -> list[T]:
    """Case-insensitive substring match across *fields*; blank term keeps all."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(items)
    return [
        item
        for item in items
        if any(needle in str(getattr(item, f, "") or "").lower() for f in fields)
    ]


def in_band(value: float, band: ProgressBand) -> bool:
    if band == ProgressBand.HIGH:
        return value >= 80
    if band == ProgressBand.MEDIUM:
        return 50 <= value < 80
    if band == ProgressBand.LOW:
        return value < 50
    return True


def in_score_band(value: float, band: ScoreBand) -> bool:
    if band == ScoreBand.HIGH:
        return value >= 80
    if band == ScoreBand.MEDIUM:
        return 60 <= value < 80
    if band == ScoreBand.LOW:
        return value < 60
    return True


def filter_progress_band(
    items: Iterable[T], band: ProgressBand, field: str = "overall_progress"
) -> list[T]:
    return [item for item in items if in_band(getattr(item, field), band)]


def filter_score_band(rows: Iterable[AttemptRow], band: ScoreBand) -> list[AttemptRow]:
    return [r for r in rows if in_score_band(r.percentage, band)]


# ── sort / paginate ───────────────────────────────────────────────────────────


def _sort_value(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def sort_items(items: Iterable[T], field: str, *, descending: bool = False) -> list[T]:
    """Stable sort on one attribute; items where it is None go last."""
    items = list(items)
    present = [i for i in items if getattr(i, field, None) is not None]
    missing = [i for i in items if getattr(i, field, None) is None]
    present.sort(key=lambda i: _sort_value(getattr(i, field)), reverse=descending)
    return present + missing


def paginate(items: Sequence[T], skip: int = 0, limit: int | None = None) -> list[T]:
    if limit is None:
        return list(items[skip:])
    return list(items[skip : skip + limit])


# ── teacher student list ──────────────────────────────────────────────────────


def student_status(summary: StudentSummary, now: datetime, window_days: int = 7) -> StudentStatus:
    if is_active(summary, now, window_days):
        return StudentStatus.ACTIVE
    if summary.overall_progress < STRUGGLING_PROGRESS:
        return StudentStatus.STRUGGLING
    return StudentStatus.INACTIVE


def student_list(
    summaries: Iterable[StudentSummary], now: datetime, window_days: int = 7
) -> list[StudentListItem]:
    return [
        StudentListItem(
            id=s.id,
            name=s.name,
            email=s.email,
            avatar=s.avatar,
            progress=s.overall_progress,
            courses_completed=s.completed_courses,
            total_courses=s.total_courses,
            last_active=s.last_active,
            status=student_status(s, now, window_days),
            average_score=s.average_score,
            streak=s.streak,
            courses=[cp.course_name for cp in s.course_progress],
        )
        for s in summaries
    ]


def filter_status(
    items: Iterable[StudentListItem], status: StudentStatus | None
) -> list[StudentListItem]:
    if status is None:
        return list(items)
    return [i for i in items if i.status == status]


# ── quiz-attempt listing ──────────────────────────────────────────────────────


def attempt_rows(
    attempts: Iterable[QuizAttemptRecord],
    catalog: CourseCatalog,
    users: Mapping[str, UserRecord],
) -> list[AttemptRow]:
    """Join attempts with student, quiz and course; newest first."""
    rows: list[AttemptRow] = []
    for a in attempts:
        quiz = catalog.quizzes.get(a.quiz_id)
        course_id = catalog.quiz_course(a.quiz_id)
        user = users.get(a.user_id)
        rows.append(
            AttemptRow(
                id=a.id,
                student_id=a.user_id,
                student_name=(user.full_name if user is not None else "") or UNKNOWN_STUDENT,
                student_email=user.email if user is not None else "",
                quiz_id=a.quiz_id,
                quiz_title=(quiz.title if quiz is not None else "") or UNKNOWN_QUIZ,
                course_id=course_id or "",
                course_title=catalog.title(course_id) if course_id else UNKNOWN_COURSE,
                score=a.score,
                percentage=a.percentage,
                passed=a.is_passed,
                completed_at=a.completed_at,
                time_spent_seconds=a.time_spent_seconds,
            )
        )
    return sort_items(rows, "completed_at", descending=True)
