# =============================================================================
# Records API — Paginated Listing, Lookup, and Export
# =============================================================================
#
# ENDPOINTS:
#   GET /records          — search + sort + paginate
#   GET /records/export   — capped bulk fetch (id descending)
#   GET /records/{id}     — single record
#
# Query parameters are declared as plain optional strings on purpose: bad
# page/limit/sort values are normalised by the query builder, never answered
# with a 422. Only a non-numeric {id} is a client error (400).
#
# /records/export is registered before /records/{id} so "export" is not
# captured as an id.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.api.deps import get_record_service, get_request_start, get_valid_record_id
from app.models.responses import (
    ErrorResponse,
    ExportResponse,
    RecordDetailResponse,
    RecordListResponse,
    RecordResponse,
)
from app.services.query_builder import build_export_query, build_list_query
from app.services.records import RecordService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/records", tags=["Records"])

NOT_FOUND_MESSAGE = "Personal data not found"


# ---------------------------------------------------------------------------
# GET /records — List
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=RecordListResponse,
    summary="Search, sort and paginate personal records",
    responses={500: {"model": ErrorResponse}},
)
async def list_records(
    page: str | None = Query(default=None, description="Zero-based page index"),
    limit: str | None = Query(default=None, description="Rows per page (default 10)"),
    search: str | None = Query(
        default=None,
        description="Case-insensitive substring matched against all text fields",
    ),
    sort_field: str | None = Query(
        default=None,
        alias="sortField",
        description="id, first_name, last_name, email, gender or ip_address",
    ),
    sort_direction: str | None = Query(
        default=None, alias="sortDirection", description="asc or desc",
    ),
    started_at: float = Depends(get_request_start),
    service: RecordService = Depends(get_record_service),
) -> RecordListResponse:
    """Return one page of records plus total-count metadata."""
    descriptor = build_list_query(
        page=page,
        limit=limit,
        search=search,
        sort_field=sort_field,
        sort_direction=sort_direction,
    )
    result = await service.list(descriptor, started_at=started_at)
    return RecordListResponse.from_page(result)


# ---------------------------------------------------------------------------
# GET /records/export — Export
# ---------------------------------------------------------------------------


@router.get(
    "/export",
    response_model=ExportResponse,
    summary="Export matching records (hard-capped, unpaginated)",
    responses={500: {"model": ErrorResponse}},
)
async def export_records(
    search: str | None = Query(default=None),
    max_export: str | None = Query(
        default=None,
        alias="maxExport",
        description="Maximum rows to return (default 1000)",
    ),
    service: RecordService = Depends(get_record_service),
) -> ExportResponse:
    """Return up to maxExport matching records ordered by id descending."""
    descriptor = build_export_query(search=search, max_export=max_export)
    result = await service.export(descriptor)
    return ExportResponse.from_result(result)


# ---------------------------------------------------------------------------
# GET /records/{record_id} — Get by id
# ---------------------------------------------------------------------------


@router.get(
    "/{record_id}",
    response_model=RecordDetailResponse,
    summary="Get a single personal record",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def get_record(
    parsed_id: int = Depends(get_valid_record_id),
    service: RecordService = Depends(get_record_service),
):
    """Return the record, or 404 when no record has this id."""
    record = await service.get_by_id(parsed_id)
    if record is None:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(message=NOT_FOUND_MESSAGE).model_dump(exclude_none=True),
        )
    return RecordDetailResponse(data=RecordResponse.model_validate(record))
