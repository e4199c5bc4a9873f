"""Row source backed by the hosted Supabase REST API (singleton client).

PostgREST caps every response (1000 rows by default) and the filters ride
in the URL, so ``fetch`` pages with ``.range()`` and splits long ``in``
lists into chunks of ``IN_CHUNK`` ids, issuing one query per chunk.
"""

import itertools
import logging
from dataclasses import replace
from datetime import datetime
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from scholardorm.config import settings
from scholardorm.services.row_source import (
    DataSourceError,
    RowFilter,
    RowNotFoundError,
    RowOrder,
    RowQuery,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000
IN_CHUNK = 150


def _apply_filter(builder: Any, f: RowFilter) -> Any:
    if f.op == "in":
        return builder.in_(f.column, list(f.value))
    if f.op == "is":
        return builder.is_(f.column, "null" if f.value is None else str(f.value).lower())
    value = f.value.isoformat() if isinstance(f.value, datetime) else f.value
    # eq / neq / gt / gte / lt / lte / ilike share the builder method name
    return getattr(builder, f.op)(f.column, value)


def _chunked(query: RowQuery) -> list[RowQuery]:
    """Split every oversized ``in`` filter; one query per combination of chunks."""
    options: list[list[RowFilter]] = []
    for f in query.filters:
        values = list(f.value) if f.op == "in" else []
        if f.op == "in" and len(values) > IN_CHUNK:
            options.append(
                [
                    RowFilter(f.column, "in", values[i : i + IN_CHUNK])
                    for i in range(0, len(values), IN_CHUNK)
                ]
            )
        else:
            options.append([f])
    return [replace(query, filters=tuple(combo)) for combo in itertools.product(*options)]


class SupabaseRowSource:
    """Thin wrapper around the Supabase query builder."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def _select(self, query: RowQuery) -> Any:
        builder = self._client.table(query.table).select(query.columns)
        for f in query.filters:
            builder = _apply_filter(builder, f)
        # pages need a total order; every consumed table has an ``id``
        for o in query.order or (RowOrder("id"),):
            builder = builder.order(o.column, desc=o.descending)
        return builder

    def _fetch_pages(self, query: RowQuery) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        while True:
            size = PAGE_SIZE
            if query.limit is not None:
                size = min(size, query.limit - len(rows))
                if size <= 0:
                    break
            start = len(rows)
            try:
                response = self._select(query).range(start, start + size - 1).execute()
            except (APIError, httpx.HTTPError) as exc:
                raise DataSourceError(query.table, str(exc)) from exc
            page = list(response.data or [])
            rows.extend(page)
            if len(page) < size:
                break
        return rows

    def fetch(self, query: RowQuery) -> list[dict[str, Any]]:
        parts = _chunked(query)
        if len(parts) == 1:
            return self._fetch_pages(query)
        logger.debug("Splitting %s fetch into %d chunked queries", query.table, len(parts))
        rows: list[dict[str, Any]] = []
        for part in parts:
            rows.extend(self._fetch_pages(part))
        # re-apply order and limit across chunks; nulls last ascending, first descending
        for o in reversed(query.order):
            rows.sort(key=lambda r, c=o.column: (r.get(c) is None, r.get(c)), reverse=o.descending)
        return rows if query.limit is None else rows[: query.limit]

    def update(self, table: str, row_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.table(table).update(patch).eq("id", row_id).execute()
        except (APIError, httpx.HTTPError) as exc:
            raise DataSourceError(table, str(exc)) from exc
        if not response.data:
            raise RowNotFoundError(table, row_id)
        return response.data[0]

    def delete(self, table: str, row_id: str) -> None:
        try:
            response = self._client.table(table).delete().eq("id", row_id).execute()
        except (APIError, httpx.HTTPError) as exc:
            raise DataSourceError(table, str(exc)) from exc
        if not response.data:
            raise RowNotFoundError(table, row_id)


# ── singleton accessor ────────────────────────────────────────────────────────

_instance: Client | None = None


def get_supabase_client() -> Client:
    global _instance
    if _instance is None:
        _instance = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        logger.info("Supabase client initialised → %s", settings.SUPABASE_URL)
    return _instance
