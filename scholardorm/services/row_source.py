"""Backend query interface shared by the Supabase and direct-SQL row sources.

A row source answers three calls:

    fetch(query)                  → list of row dicts
    update(table, row_id, patch)  → the updated row
    delete(table, row_id)         → None

Rows come back exactly as the backend stores them; parsing into typed
records happens one layer up, in ``services.repository``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Protocol

FilterOp = Literal["eq", "neq", "gt", "gte", "lt", "lte", "in", "ilike", "is"]


class DataSourceError(Exception):
    """Any failure reported by the backend or the transport in front of it."""

    def __init__(self, table: str, message: str) -> None:
        super().__init__(f"{table}: {message}")
        self.table = table
        self.message = message


class RowNotFoundError(DataSourceError):
    """A single-row write addressed an id that does not exist."""

    def __init__(self, table: str, row_id: str) -> None:
        super().__init__(table, f"no row with id {row_id!r}")
        self.row_id = row_id


@dataclass(frozen=True)
class RowFilter:
    column: str
    op: FilterOp
    value: Any


@dataclass(frozen=True)
class RowOrder:
    column: str
    descending: bool = False


@dataclass(frozen=True)
class RowQuery:
    """Filtered / ordered select against one table."""

    table: str
    filters: tuple[RowFilter, ...] = ()
    order: tuple[RowOrder, ...] = ()
    columns: str = "*"
    limit: int | None = None

    def where(self, column: str, op: FilterOp, value: Any) -> "RowQuery":
        """Return a copy with one more filter appended."""
        return RowQuery(
            table=self.table,
            filters=(*self.filters, RowFilter(column, op, value)),
            order=self.order,
            columns=self.columns,
            limit=self.limit,
        )

    def order_by(self, column: str, *, descending: bool = False) -> "RowQuery":
        return RowQuery(
            table=self.table,
            filters=self.filters,
            order=(*self.order, RowOrder(column, descending)),
            columns=self.columns,
            limit=self.limit,
        )


class RowSource(Protocol):
    def fetch(self, query: RowQuery) -> list[dict[str, Any]]: ...

    def update(self, table: str, row_id: str, patch: dict[str, Any]) -> dict[str, Any]: ...

    def delete(self, table: str, row_id: str) -> None: ...

