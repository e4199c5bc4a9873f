"""Per-course rollup over the per-student summaries."""

from collections import defaultdict
from typing import Iterable

from scholardorm.schemas.progress import (
    CourseProgress,
    CourseRollup,
    CourseStatus,
    EngagementLevel,
    StudentSummary,
)
from scholardorm.schemas.records import CourseRecord
from scholardorm.services.catalog import UNKNOWN_COURSE
from scholardorm.services.progress import mean

HIGH_ENGAGEMENT = 80.0
MEDIUM_ENGAGEMENT = 50.0


def engagement_level(average_progress: float) -> EngagementLevel:
    if average_progress >= HIGH_ENGAGEMENT:
        return EngagementLevel.HIGH
    if average_progress >= MEDIUM_ENGAGEMENT:
        return EngagementLevel.MEDIUM
    return EngagementLevel.LOW


def rollup_courses(
    summaries: Iterable[StudentSummary],
    courses: Iterable[CourseRecord],
) -> list[CourseRollup]:
    """One rollup per roster course, in roster order.

    The score mean only covers enrolled students with at least one attempt
    in the course, mirroring how the student-level score is computed.
    """
    by_course: dict[str, list[CourseProgress]] = defaultdict(list)
    for s in summaries:
        for cp in s.course_progress:
            by_course[cp.course_id].append(cp)

    rollups: list[CourseRollup] = []
    for course in courses:
        entries = by_course.get(course.id, [])
        enrolled = len(entries)
        average_progress = mean(cp.progress for cp in entries)
        completed = sum(1 for cp in entries if cp.status == CourseStatus.COMPLETED)
        rollups.append(
            CourseRollup(
                course_id=course.id,
                course_name=course.title or UNKNOWN_COURSE,
                enrolled_students=enrolled,
                average_progress=round(average_progress, 2),
                average_score=round(
                    mean(cp.average_score for cp in entries if cp.quiz_attempts), 2
                ),
                completion_rate=round(completed * 100 / enrolled, 2) if enrolled else 0.0,
                engagement=engagement_level(average_progress),
            )
        )
    return rollups
