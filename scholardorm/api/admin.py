"""Admin dashboard routes: platform-wide analytics."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from scholardorm.api.deps import get_source, require_admin
from scholardorm.schemas.admin import AnalyticsResponse, TimeRange
from scholardorm.schemas.records import UserRecord
from scholardorm.services.activity import platform_analytics, window_bounds
from scholardorm.services.repository import load_platform_snapshot
from scholardorm.services.row_source import RowSource

router = APIRouter()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(
    time_range: TimeRange = Query(TimeRange.MONTH),
    source: RowSource = Depends(get_source),
    _admin: UserRecord = Depends(require_admin),
):
    """User, engagement and activity numbers for the selected window."""
    now = _utcnow()
    _, start = window_bounds(time_range, now)
    snapshot = load_platform_snapshot(source, start)
    return platform_analytics(snapshot, time_range, now)
