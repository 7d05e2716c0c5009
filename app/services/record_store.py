# =============================================================================
# Record Store Abstraction — Pluggable Read Backend
# =============================================================================
#
# The record service needs exactly three capabilities from storage:
#   count(filter)                           → number of matching rows
#   fetch(filter, ordering, offset, limit)  → one ordered slice of rows
#   get(record_id)                          → one row or None
#
# ARCHITECTURE:
#   RecordStore (Protocol)
#   ├── SqlRecordStore      — SQLAlchemy AsyncSession over `personaldata`
#   └── InMemoryRecordStore — list of Records (seed file, demos, tests)
#
# Protocol (structural typing) rather than an ABC: any object with these
# coroutine methods can stand in for storage, including test fakes.
#
# Column names reach SQL only through `_COLUMNS`, which is keyed by the
# SortField enum. Search fields are resolved through the same mapping.
# =============================================================================

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Protocol

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import PersonalData
from app.services.query_builder import SearchFilter, SortDirection, SortField

logger = logging.getLogger(__name__)

# (field, direction) pairs, most significant first.
Ordering = Sequence[tuple[SortField, SortDirection]]


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Record:
    """One immutable personal record."""

    id: int
    first_name: str
    last_name: str
    email: str
    gender: str
    ip_address: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Record:
        return cls(
            id=int(data["id"]),
            first_name=str(data.get("first_name") or ""),
            last_name=str(data.get("last_name") or ""),
            email=str(data.get("email") or ""),
            gender=str(data.get("gender") or ""),
            ip_address=str(data.get("ip_address") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class RecordStore(Protocol):
    """Read-only access to personal records."""

    async def count(self, search_filter: SearchFilter) -> int:
        """Number of records matching `search_filter`."""
        ...

    async def fetch(
        self,
        search_filter: SearchFilter,
        ordering: Ordering,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Record]:
        """
        Matching records, ordered, skipping `offset`, at most `limit`.

        `limit=None` means no upper bound.
        """
        ...

    async def get(self, record_id: int) -> Record | None:
        """The record with `record_id`, or None."""
        ...


# ---------------------------------------------------------------------------
# Implementation 1: SQL (SQLAlchemy)
# ---------------------------------------------------------------------------

_COLUMNS = {f: getattr(PersonalData, f.value) for f in SortField}

# `id` is a 32-bit INTEGER column; OFFSET/LIMIT bind as signed 64-bit.
_ID_MIN, _ID_MAX = -(2**31), 2**31 - 1
_SQL_BIGINT_MAX = 2**63 - 1


class SqlRecordStore:
    """
    Record store backed by the `personaldata` table.

    One instance per request; it borrows the request's AsyncSession.
    Count and fetch run sequentially because an AsyncSession does not
    support concurrent statements.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def count(self, search_filter: SearchFilter) -> int:
        stmt = _apply_filter(select(func.count(PersonalData.id)), search_filter)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def fetch(
        self,
        search_filter: SearchFilter,
        ordering: Ordering,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Record]:
        stmt = _apply_filter(select(PersonalData), search_filter)
        for sort_field, direction in ordering:
            column = _COLUMNS[sort_field]
            stmt = stmt.order_by(
                column.asc() if direction is SortDirection.ASC else column.desc()
            )
        if offset:
            if offset > _SQL_BIGINT_MAX:
                return []
            stmt = stmt.offset(offset)
        # a limit past BIGINT range cannot cut anything off; leave it out
        if limit is not None and limit <= _SQL_BIGINT_MAX:
            stmt = stmt.limit(limit)

        result = await self._session.execute(stmt)
        return [_to_record(row) for row in result.scalars().all()]

    async def get(self, record_id: int) -> Record | None:
        if not _ID_MIN <= record_id <= _ID_MAX:
            return None
        row = await self._session.get(PersonalData, record_id)
        return _to_record(row) if row is not None else None


def _apply_filter(stmt, search_filter: SearchFilter):
    """Add the OR-ed case-insensitive contains clauses, if any."""
    if search_filter.is_empty:
        return stmt
    clauses = [
        _COLUMNS[SortField(name)].icontains(search_filter.term, autoescape=True)
        for name in search_filter.fields
    ]
    return stmt.where(or_(*clauses))


def _to_record(row: PersonalData) -> Record:
    return Record(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        gender=row.gender,
        ip_address=row.ip_address,
    )


# ---------------------------------------------------------------------------
# Implementation 2: In-Memory
# ---------------------------------------------------------------------------


class InMemoryRecordStore:
    """
    Record store over a fixed list of records.

    The list is never mutated after construction, so one instance can be
    shared by concurrent requests.
    """

    def __init__(self, records: Iterable[Record]) -> None:
        self._records: tuple[Record, ...] = tuple(records)
        self._by_id = {r.id: r for r in self._records}

    @classmethod
    def from_json_file(cls, path: str | Path) -> InMemoryRecordStore:
        """Load a JSON array of record objects (mockaroo-style export)."""
        path = Path(path)
        with path.open(encoding="utf-8") as fh:
            raw = json.load(fh)
        records = [Record.from_mapping(item) for item in raw]
        logger.info("Loaded %d records from %s", len(records), path)
        return cls(records)

    def __len__(self) -> int:
        return len(self._records)

    async def count(self, search_filter: SearchFilter) -> int:
        return sum(1 for r in self._records if search_filter.matches(r))

    async def fetch(
        self,
        search_filter: SearchFilter,
        ordering: Ordering,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Record]:
        rows = [r for r in self._records if search_filter.matches(r)]
        # Stable sorts applied least-significant key first.
        for sort_field, direction in reversed(ordering):
            rows.sort(
                key=lambda r, name=sort_field.value: getattr(r, name),
                reverse=direction is SortDirection.DESC,
            )
        end = None if limit is None else offset + limit
        return rows[offset:end]

    async def get(self, record_id: int) -> Record | None:
        return self._by_id.get(record_id)
