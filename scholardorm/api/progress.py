"""Teacher progress routes: per-student summaries, headline stats, course rollup."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status

from scholardorm.api.deps import get_course_scope, get_source
from scholardorm.config import settings
from scholardorm.schemas.progress import CourseRollup, ProgressStats, StudentSummary
from scholardorm.services.listing import (
    DEFAULT_DESCENDING,
    ProgressBand,
    SortKey,
    filter_progress_band,
    paginate,
    search,
    sort_items,
)
from scholardorm.services.progress import progress_stats, summarize_students
from scholardorm.services.repository import load_progress_dataset
from scholardorm.services.rollup import rollup_courses
from scholardorm.services.row_source import RowSource

router = APIRouter()

SUMMARY_SORT_FIELDS = {
    SortKey.NAME: "name",
    SortKey.PROGRESS: "overall_progress",
    SortKey.SCORE: "average_score",
    SortKey.LAST_ACTIVE: "last_active",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _summaries(source: RowSource, course_ids: list[str]) -> tuple[list[StudentSummary], list]:
    dataset = load_progress_dataset(source, course_ids)
    summaries = summarize_students(
        dataset.enrollments,
        dataset.lesson_progress,
        dataset.attempts,
        dataset.catalog,
        dataset.users,
    )
    return summaries, list(dataset.catalog.courses.values())


# ── 1. Student summaries ─────────────────────────────────────────────────────


@router.get("/students", response_model=list[StudentSummary])
def list_student_progress(
    term: str | None = Query(None, alias="search", description="Search by name or email"),
    band: ProgressBand = Query(ProgressBand.ALL),
    sort: SortKey = Query(SortKey.NAME),
    descending: bool | None = Query(None, description="Defaults per sort key"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    course_ids: list[str] = Depends(get_course_scope),
    source: RowSource = Depends(get_source),
):
    """Progress summary of every student enrolled in the caller's courses."""
    summaries, _ = _summaries(source, course_ids)
    rows = filter_progress_band(search(summaries, term, ("name", "email")), band)
    if descending is None:
        descending = DEFAULT_DESCENDING[sort]
    rows = sort_items(rows, SUMMARY_SORT_FIELDS[sort], descending=descending)
    return paginate(rows, skip, limit)


@router.get("/students/{student_id}", response_model=StudentSummary)
def get_student_progress(
    student_id: str,
    course_ids: list[str] = Depends(get_course_scope),
    source: RowSource = Depends(get_source),
):
    summaries, _ = _summaries(source, course_ids)
    for s in summaries:
        if s.id == student_id:
            return s
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Student not found"
    )


# ── 2. Headline numbers ──────────────────────────────────────────────────────


@router.get("/stats", response_model=ProgressStats)
def get_progress_stats(
    course_ids: list[str] = Depends(get_course_scope),
    source: RowSource = Depends(get_source),
):
    summaries, _ = _summaries(source, course_ids)
    return progress_stats(summaries, _utcnow(), settings.ACTIVE_WINDOW_DAYS)


# ── 3. Course rollup ─────────────────────────────────────────────────────────


@router.get("/courses", response_model=list[CourseRollup])
def get_course_rollup(
    course_ids: list[str] = Depends(get_course_scope),
    source: RowSource = Depends(get_source),
):
    """One row per course in the caller's set, including courses nobody took."""
    summaries, courses = _summaries(source, course_ids)
    return rollup_courses(summaries, courses)
