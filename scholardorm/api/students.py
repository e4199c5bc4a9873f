"""Teacher student table and quiz-attempt listing."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from scholardorm.api.deps import get_course_scope, get_source
from scholardorm.config import settings
from scholardorm.schemas.student import AttemptRow, StudentListItem, StudentStatus
from scholardorm.services.listing import (
    DEFAULT_DESCENDING,
    ProgressBand,
    ScoreBand,
    SortKey,
    attempt_rows,
    filter_progress_band,
    filter_score_band,
    filter_status,
    paginate,
    search,
    sort_items,
    student_list,
)
from scholardorm.services.progress import summarize_students
from scholardorm.services.repository import load_progress_dataset
from scholardorm.services.row_source import RowSource

router = APIRouter()

LIST_SORT_FIELDS = {
    SortKey.NAME: "name",
    SortKey.PROGRESS: "progress",
    SortKey.SCORE: "average_score",
    SortKey.LAST_ACTIVE: "last_active",
}

ATTEMPT_SEARCH_FIELDS = ("student_name", "student_email", "quiz_title", "course_title")


# ── 1. Student table ─────────────────────────────────────────────────────────


@router.get("", response_model=list[StudentListItem])
def list_students(
    term: str | None = Query(None, alias="search", description="Search by name or email"),
    student_status: StudentStatus | None = Query(None, alias="status"),
    band: ProgressBand = Query(ProgressBand.ALL),
    sort: SortKey = Query(SortKey.NAME),
    descending: bool | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    course_ids: list[str] = Depends(get_course_scope),
    source: RowSource = Depends(get_source),
):
    """Students of the caller's courses with an active / struggling / inactive flag."""
    dataset = load_progress_dataset(source, course_ids)
    summaries = summarize_students(
        dataset.enrollments,
        dataset.lesson_progress,
        dataset.attempts,
        dataset.catalog,
        dataset.users,
    )
    items = student_list(summaries, datetime.now(timezone.utc), settings.ACTIVE_WINDOW_DAYS)
    items = search(items, term, ("name", "email"))
    items = filter_progress_band(filter_status(items, student_status), band, field="progress")
    if descending is None:
        descending = DEFAULT_DESCENDING[sort]
    return paginate(sort_items(items, LIST_SORT_FIELDS[sort], descending=descending), skip, limit)


# ── 2. Quiz attempts ─────────────────────────────────────────────────────────


@router.get("/attempts", response_model=list[AttemptRow])
def list_attempts(
    term: str | None = Query(
        None, alias="search", description="Search by student, email, quiz or course"
    ),
    course_id: str | None = Query(None),
    score: ScoreBand = Query(ScoreBand.ALL),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    course_ids: list[str] = Depends(get_course_scope),
    source: RowSource = Depends(get_source),
):
    """Quiz attempts on the caller's courses, newest first."""
    if course_id is not None:
        course_ids = [c for c in course_ids if c == course_id]
    dataset = load_progress_dataset(source, course_ids)
    rows = attempt_rows(dataset.attempts, dataset.catalog, dataset.users)
    rows = filter_score_band(search(rows, term, ATTEMPT_SEARCH_FIELDS), score)
    return paginate(rows, skip, limit)
