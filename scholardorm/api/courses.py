"""Single-course analytics route."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from scholardorm.api.deps import get_course_scope, get_source
from scholardorm.config import settings
from scholardorm.schemas.course import CourseAnalyticsResponse
from scholardorm.services.course_analytics import course_analytics
from scholardorm.services.repository import load_course_detail
from scholardorm.services.row_source import RowSource

router = APIRouter()


@router.get("/{course_id}/analytics", response_model=CourseAnalyticsResponse)
def get_course_analytics(
    course_id: str,
    course_ids: list[str] = Depends(get_course_scope),
    source: RowSource = Depends(get_source),
):
    """Header numbers, per-student rows and per-quiz stats for one course."""
    if course_id not in course_ids:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Course not found"
        )
    dataset = load_course_detail(source, course_id)
    return course_analytics(
        course_id, dataset, datetime.now(timezone.utc), settings.ACTIVE_WINDOW_DAYS
    )
