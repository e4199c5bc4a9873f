"""Declarative base and lazily-built session factory for ``DATA_BACKEND=sql``."""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from scholardorm.config import settings


class Base(DeclarativeBase):
    """Shared declarative base for the consumed tables."""


# Built on first use so the Supabase backend never opens a Postgres pool
_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_session_factory() -> sessionmaker:
    global _engine, _session_factory
    if _session_factory is None:
        _engine = create_engine(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            pool_pre_ping=True,
        )
        _session_factory = sessionmaker(bind=_engine, autoflush=False)
    return _session_factory
