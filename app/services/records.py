# =============================================================================
# Record Service — List / Get-by-id / Export over a RecordStore
# =============================================================================
#
# Executes validated descriptors (see query_builder.py) against a RecordStore
# and assembles the results the API serialises.
#
# FAILURE SEMANTICS:
# - Any exception raised by the store is logged with its traceback and
#   re-raised as RecordStoreError. The operation produces nothing partial.
# - Store calls are never retried.
# - A page beyond the last one is NOT a failure: it returns zero rows.
# - A missing record is NOT a failure: get_by_id returns None.
# =============================================================================

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.config import settings
from app.services.query_builder import (
    ExportDescriptor,
    QueryDescriptor,
    SortDirection,
    SortField,
    parse_record_id,
)
from app.services.record_store import Ordering, Record, RecordStore

logger = logging.getLogger(__name__)

LIST_FAILURE_MESSAGE = "Failed to fetch personal data"
GET_FAILURE_MESSAGE = "Failed to fetch personal data by ID"
EXPORT_FAILURE_MESSAGE = "Failed to export personal data"


class RecordStoreError(RuntimeError):
    """
    The record store failed while serving an operation.

    `message` is safe to show to clients; `detail` carries the underlying
    error text for diagnostics.
    """

    def __init__(self, message: str, detail: str) -> None:
        super().__init__(f"{message}: {detail}")
        self.message = message
        self.detail = detail


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class ResultPage:
    """One page of matching records plus count metadata."""

    rows: list[Record]
    total_rows: int
    total_pages: int
    page: int
    limit: int
    sort_field: SortField
    sort_direction: SortDirection
    search_term: str
    execution_time_ms: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class ExportResult:
    """A bounded, unpaginated bulk fetch."""

    rows: list[Record]

    @property
    def total_exported(self) -> int:
        return len(self.rows)


def total_pages(total_rows: int, limit: int) -> int:
    """ceil(total_rows / limit); 0 when there are no rows."""
    if total_rows <= 0:
        return 0
    return -(-total_rows // limit)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class RecordService:
    """
    Read operations over personal records.

    Stateless apart from the injected store; construct one per request.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        tiebreak_by_id: bool | None = None,
    ) -> None:
        self._store = store
        self._tiebreak_by_id = (
            settings.sort_tiebreak_by_id if tiebreak_by_id is None else tiebreak_by_id
        )

    async def list(
        self,
        descriptor: QueryDescriptor,
        *,
        started_at: float | None = None,
    ) -> ResultPage:
        """
        Fetch one page of records matching `descriptor`.

        Args:
            descriptor: Validated listing parameters.
            started_at: time.monotonic() reading taken when the request
                arrived. Defaults to now, i.e. service time only.

        Raises:
            RecordStoreError: The count or the fetch failed.
        """
        if started_at is None:
            started_at = time.monotonic()
        timestamp = datetime.now(UTC)

        try:
            total_rows = await self._store.count(descriptor.search_filter)
            if descriptor.offset >= total_rows:
                # nothing past the last row; also keeps huge offsets out of SQL
                rows = []
            else:
                rows = await self._store.fetch(
                    descriptor.search_filter,
                    self._ordering(descriptor.sort_field, descriptor.sort_direction),
                    offset=descriptor.offset,
                    limit=descriptor.limit,
                )
        except Exception as e:
            logger.exception("Record listing failed: %s", descriptor)
            raise RecordStoreError(LIST_FAILURE_MESSAGE, str(e)) from e

        elapsed_ms = int((time.monotonic() - started_at) * 1000)
        logger.debug(
            "Listed %d/%d records (page=%d, limit=%d) in %dms",
            len(rows), total_rows, descriptor.page, descriptor.limit, elapsed_ms,
        )

        return ResultPage(
            rows=rows,
            total_rows=total_rows,
            total_pages=total_pages(total_rows, descriptor.limit),
            page=descriptor.page,
            limit=descriptor.limit,
            sort_field=descriptor.sort_field,
            sort_direction=descriptor.sort_direction,
            search_term=descriptor.search_term,
            execution_time_ms=elapsed_ms,
            timestamp=timestamp,
        )

    async def get_by_id(self, record_id: int | str) -> Record | None:
        """
        Look up a single record.

        Returns None when no record has that id.

        Raises:
            InvalidIdentifierError: `record_id` is not an integer. The store
                is not queried.
            RecordStoreError: The lookup failed.
        """
        parsed_id = parse_record_id(record_id)
        try:
            return await self._store.get(parsed_id)
        except Exception as e:
            logger.exception("Record lookup failed: id=%d", parsed_id)
            raise RecordStoreError(GET_FAILURE_MESSAGE, str(e)) from e

    async def export(self, descriptor: ExportDescriptor) -> ExportResult:
        """
        Fetch at most `descriptor.max_export` matching records, id descending.

        A single bounded fetch: no count query, no pagination.

        Raises:
            RecordStoreError: The fetch failed.
        """
        try:
            rows = await self._store.fetch(
                descriptor.search_filter,
                ((descriptor.sort_field, descriptor.sort_direction),),
                offset=0,
                limit=descriptor.max_export,
            )
        except Exception as e:
            logger.exception("Record export failed: %s", descriptor)
            raise RecordStoreError(EXPORT_FAILURE_MESSAGE, str(e)) from e

        logger.info(
            "Exported %d records (search=%r, max=%d)",
            len(rows), descriptor.search_term, descriptor.max_export,
        )
        return ExportResult(rows=rows)

    def _ordering(self, sort_field: SortField, direction: SortDirection) -> Ordering:
        if self._tiebreak_by_id and sort_field is not SortField.ID:
            return ((sort_field, direction), (SortField.ID, direction))
        return ((sort_field, direction),)
