"""Row source that queries the backend Postgres directly through SQLAlchemy Core."""

import logging
from typing import Any

from sqlalchemy import Table, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scholardorm.db import models  # noqa: F401  (registers the table declarations)
from scholardorm.db.session import Base
from scholardorm.services.row_source import (
    DataSourceError,
    RowFilter,
    RowNotFoundError,
    RowQuery,
)

logger = logging.getLogger(__name__)


def _table(name: str) -> Table:
    table = Base.metadata.tables.get(name)
    if table is None:
        raise DataSourceError(name, "unknown table")
    return table


def _clause(table: Table, f: RowFilter):
    if f.column not in table.c:
        raise DataSourceError(table.name, f"unknown column {f.column!r}")
    col = table.c[f.column]
    if f.op == "eq":
        return col == f.value
    if f.op == "neq":
        return col != f.value
    if f.op == "gt":
        return col > f.value
    if f.op == "gte":
        return col >= f.value
    if f.op == "lt":
        return col < f.value
    if f.op == "lte":
        return col <= f.value
    if f.op == "in":
        return col.in_(list(f.value))
    if f.op == "ilike":
        return col.ilike(f.value)
    if f.op == "is":
        return col.is_(f.value)
    raise DataSourceError(table.name, f"unsupported filter op {f.op!r}")


class SqlRowSource:
    """Executes row queries on a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._db = session

    def fetch(self, query: RowQuery) -> list[dict[str, Any]]:
        table = _table(query.table)
        if query.columns == "*":
            stmt = select(table)
        else:
            names = [c.strip() for c in query.columns.split(",") if c.strip()]
            missing = [n for n in names if n not in table.c]
            if missing:
                raise DataSourceError(table.name, f"unknown columns {missing}")
            stmt = select(*(table.c[n] for n in names))

        for f in query.filters:
            stmt = stmt.where(_clause(table, f))
        for o in query.order:
            col = table.c[o.column]
            stmt = stmt.order_by(col.desc() if o.descending else col.asc())
        if query.limit is not None:
            stmt = stmt.limit(query.limit)

        try:
            result = self._db.execute(stmt)
        except SQLAlchemyError as exc:
            raise DataSourceError(table.name, str(exc)) from exc
        return [dict(row._mapping) for row in result]

    def update(self, table_name: str, row_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        table = _table(table_name)
        unknown = [k for k in patch if k not in table.c]
        if unknown:
            raise DataSourceError(table.name, f"unknown columns {unknown}")
        try:
            result = self._db.execute(
                update(table).where(table.c.id == row_id).values(**patch)
            )
            if result.rowcount == 0:
                self._db.rollback()
                raise RowNotFoundError(table.name, row_id)
            self._db.commit()
            row = self._db.execute(select(table).where(table.c.id == row_id)).first()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise DataSourceError(table.name, str(exc)) from exc
        logger.debug("Updated %s/%s: %s", table.name, row_id, sorted(patch))
        return dict(row._mapping)

    def delete(self, table_name: str, row_id: str) -> None:
        table = _table(table_name)
        try:
            result = self._db.execute(delete(table).where(table.c.id == row_id))
            if result.rowcount == 0:
                self._db.rollback()
                raise RowNotFoundError(table.name, row_id)
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise DataSourceError(table.name, str(exc)) from exc
        logger.debug("Deleted %s/%s", table.name, row_id)
