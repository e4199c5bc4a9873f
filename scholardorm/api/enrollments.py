"""Single-row enrollment writes: favourite toggle, progress, unenrol."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from scholardorm.api.deps import get_current_user, get_source, require_admin
from scholardorm.schemas.common import DeletedResponse
from scholardorm.schemas.enrollment import EnrollmentPatch, EnrollmentRead
from scholardorm.schemas.records import EnrollmentRecord, UserRecord
from scholardorm.services.repository import (
    ENROLLMENTS,
    delete_enrollment,
    get_enrollment,
    teacher_course_ids,
    update_enrollment,
)
from scholardorm.services.row_source import RowSource

logger = logging.getLogger(__name__)

router = APIRouter()


def _can_write(user: UserRecord, enrollment: EnrollmentRecord, source: RowSource) -> bool:
    if user.role == "admin":
        return True
    if user.role == "teacher":
        return enrollment.course_id in teacher_course_ids(source, user.id)
    return enrollment.user_id == user.id


@router.patch("/{enrollment_id}", response_model=EnrollmentRead)
def patch_enrollment(
    enrollment_id: str,
    payload: EnrollmentPatch,
    current_user: UserRecord = Depends(get_current_user),
    source: RowSource = Depends(get_source),
):
    """Update ``favorite`` and/or ``progress_percentage`` of one enrollment."""
    patch = payload.model_dump(exclude_none=True)
    if not patch:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update"
        )
    enrollment = get_enrollment(source, enrollment_id)
    if enrollment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Enrollment not found"
        )
    if not _can_write(current_user, enrollment, source):
        logger.warning(
            "User %s denied write on enrollment %s", current_user.id, enrollment_id
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to modify this enrollment"
        )
    updated = update_enrollment(source, enrollment_id, patch)
    return EnrollmentRead.model_validate(updated.model_dump())


@router.delete("/{enrollment_id}", response_model=DeletedResponse)
def remove_enrollment(
    enrollment_id: str,
    source: RowSource = Depends(get_source),
    _admin: UserRecord = Depends(require_admin),
):
    delete_enrollment(source, enrollment_id)
    return DeletedResponse(table=ENROLLMENTS, id=enrollment_id)
