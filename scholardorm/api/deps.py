"""FastAPI dependencies shared across routes."""

from typing import Iterator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from scholardorm.config import settings
from scholardorm.core.security import decode_access_token
from scholardorm.db.session import get_session_factory
from scholardorm.schemas.records import UserRecord
from scholardorm.services.repository import all_course_ids, get_user, teacher_course_ids
from scholardorm.services.row_source import RowSource
from scholardorm.services.sql_source import SqlRowSource
from scholardorm.services.supabase_client import SupabaseRowSource, get_supabase_client

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.supabase_token_url)

STAFF_ROLES = {"teacher", "admin"}


def get_source() -> Iterator[RowSource]:
    """Yield the configured row source; a SQL session is closed after the request."""
    if settings.DATA_BACKEND == "sql":
        db = get_session_factory()()
        try:
            yield SqlRowSource(db)
        finally:
            db.close()
    else:
        yield SupabaseRowSource(get_supabase_client())


def get_current_user(
    token: str = Depends(oauth2_scheme),
    source: RowSource = Depends(get_source),
) -> UserRecord:
    """Decode the Supabase JWT and return the caller's ``users`` row, or 401."""
    payload = decode_access_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload"
        )
    user = get_user(source, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found"
        )
    return user


def require_teacher(current_user: UserRecord = Depends(get_current_user)) -> UserRecord:
    """Raise 403 unless the caller is a teacher or an admin."""
    if current_user.role not in STAFF_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Teacher access required"
        )
    return current_user


def require_admin(current_user: UserRecord = Depends(get_current_user)) -> UserRecord:
    """Raise 403 unless the caller is an admin."""
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return current_user


def get_course_scope(
    current_user: UserRecord = Depends(require_teacher),
    source: RowSource = Depends(get_source),
) -> list[str]:
    """Course ids the caller may see: every course for admins, assigned ones for teachers."""
    if current_user.role == "admin":
        return all_course_ids(source)
    return teacher_course_ids(source, current_user.id)
