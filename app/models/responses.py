# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming OUT of the API and double as
# the OpenAPI response schemas (visible at /docs).
#
# Wire names: envelope fields are camelCase (totalRows, sortField, ...)
# because the table UI consumes them as-is. Record fields keep the column
# names (first_name, ip_address, ...). Python code uses snake_case
# throughout; aliases are applied at serialisation time.
# =============================================================================

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.services.records import ExportResult, ResultPage


class _CamelModel(BaseModel):
    """Base for envelopes serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    """Response for GET /health — liveness probe."""

    status: str = "ok"
    uptime: float = Field(description="Seconds since the process started")
    timestamp: datetime


class RecordResponse(BaseModel):
    """One personal record."""

    id: int
    first_name: str
    last_name: str
    email: str
    gender: str
    ip_address: str

    model_config = ConfigDict(from_attributes=True)


class ListMetadata(_CamelModel):
    """Echo of the resolved query plus timing, for the list endpoint."""

    timestamp: datetime = Field(description="When the listing started (UTC)")
    sort_field: str
    sort_direction: Literal["asc", "desc"]
    query: str = Field(description="The search term that was applied")
    execution_time: str = Field(
        description="Time since the request arrived, e.g. '12ms'",
    )


class RecordListResponse(_CamelModel):
    """Response for GET /records — one page of records."""

    result: list[RecordResponse]
    page: int
    limit: int
    total_rows: int
    total_pages: int
    metadata: ListMetadata

    @classmethod
    def from_page(cls, page: ResultPage) -> "RecordListResponse":
        return cls(
            result=[RecordResponse.model_validate(r) for r in page.rows],
            page=page.page,
            limit=page.limit,
            total_rows=page.total_rows,
            total_pages=page.total_pages,
            metadata=ListMetadata(
                timestamp=page.timestamp,
                sort_field=page.sort_field.value,
                sort_direction=page.sort_direction.value,
                query=page.search_term,
                execution_time=f"{page.execution_time_ms}ms",
            ),
        )


class RecordDetailResponse(BaseModel):
    """Response for GET /records/{id}."""

    status: Literal["success"] = "success"
    data: RecordResponse


class ExportResponse(_CamelModel):
    """Response for GET /records/export — capped bulk fetch."""

    status: Literal["success"] = "success"
    total_exported: int
    data: list[RecordResponse]

    @classmethod
    def from_result(cls, result: ExportResult) -> "ExportResponse":
        return cls(
            total_exported=result.total_exported,
            data=[RecordResponse.model_validate(r) for r in result.rows],
        )


class ErrorResponse(BaseModel):
    """Error envelope shared by every non-2xx response."""

    status: Literal["error"] = "error"
    message: str
    error: str | None = Field(
        default=None,
        description="Underlying error detail (omitted when not exposed)",
    )
