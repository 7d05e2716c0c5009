# =============================================================================
# Query Builder — Untrusted Request Parameters → Validated Query Descriptor
# =============================================================================
#
# Every listing/export request arrives as a bag of optional, untrusted strings
# (page, limit, search, sortField, sortDirection, maxExport). This module turns
# them into immutable descriptors the record store can execute safely.
#
# POLICY: malformed pagination/sort/search input is never an error. Each
# value is normalised to a safe default instead:
#   page          → non-negative int, default 0
#   limit         → positive int, default 10 (optionally clamped)
#   sortField     → member of SortField, default "id"
#   sortDirection → "asc" | "desc", default "desc"
#   search        → verbatim string, default ""
#   maxExport     → positive int, default 1000
#
# The only value that IS rejected is a malformed record identifier
# (see parse_record_id), because it names a specific row.
#
# INJECTION GUARD: sort and search field names come exclusively from the
# closed SortField enum / SEARCH_FIELDS tuple below. The record store maps
# those names to columns through the same set; nothing from the request is
# ever interpolated into a query as an identifier.
# =============================================================================

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any

from app.config import settings


class SortField(str, enum.Enum):
    """Columns a listing may be ordered by."""

    ID = "id"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    EMAIL = "email"
    GENDER = "gender"
    IP_ADDRESS = "ip_address"


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


# Text columns scanned by the free-text search (every sort field except id).
SEARCH_FIELDS: tuple[str, ...] = tuple(
    f.value for f in SortField if f is not SortField.ID
)

DEFAULT_SORT_FIELD = SortField.ID
DEFAULT_SORT_DIRECTION = SortDirection.DESC

# parseInt-style prefix: optional whitespace, sign, digits. "12abc" → 12.
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
# Record ids must be an integer and nothing else.
_STRICT_INT_RE = re.compile(r"^\s*[+-]?\d+\s*$")


class InvalidIdentifierError(ValueError):
    """Raised when a record identifier is not an integer."""

    def __init__(self, raw: object) -> None:
        super().__init__(f"Invalid record identifier: {raw!r}")
        self.raw = raw


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchFilter:
    """
    Case-insensitive "contains" predicate over the searchable text fields.

    A record matches when `term` is a substring of ANY of `fields`, ignoring
    case. An empty term matches every record. SQL backends translate this
    into OR-ed ILIKE clauses; the in-memory backend calls `matches()`.
    """

    term: str = ""
    fields: tuple[str, ...] = SEARCH_FIELDS

    @property
    def is_empty(self) -> bool:
        return self.term == ""

    def matches(self, record: Any) -> bool:
        if self.is_empty:
            return True
        needle = self.term.lower()
        return any(
            needle in str(getattr(record, name) or "").lower()
            for name in self.fields
        )


@dataclass(frozen=True)
class QueryDescriptor:
    """Validated, normalised parameters for one listing request."""

    search_term: str = ""
    sort_field: SortField = DEFAULT_SORT_FIELD
    sort_direction: SortDirection = DEFAULT_SORT_DIRECTION
    page: int = 0
    limit: int = 10
    search_filter: SearchFilter = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "search_filter", SearchFilter(self.search_term))

    @property
    def offset(self) -> int:
        return self.page * self.limit


@dataclass(frozen=True)
class ExportDescriptor:
    """
    Validated parameters for a bulk export.

    Exports always order by id descending; a client-supplied sort is ignored.
    """

    search_term: str = ""
    max_export: int = 1000
    search_filter: SearchFilter = field(init=False, repr=False, compare=False)

    sort_field = SortField.ID
    sort_direction = SortDirection.DESC

    def __post_init__(self) -> None:
        object.__setattr__(self, "search_filter", SearchFilter(self.search_term))


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def build_list_query(
    page: Any = None,
    limit: Any = None,
    search: Any = None,
    sort_field: Any = None,
    sort_direction: Any = None,
    *,
    max_limit: int | None = None,
) -> QueryDescriptor:
    """
    Normalise raw listing parameters into a QueryDescriptor. Never raises.

    Args:
        page: Zero-based page index. Non-numeric or negative → 0.
        limit: Page size. Non-numeric or < 1 → settings.default_page_limit.
        search: Free-text search term. Missing → "".
        sort_field: Column name; anything outside SortField → "id".
        sort_direction: "asc" / "desc"; anything else → "desc".
        max_limit: Optional cap on `limit`. Defaults to
            settings.max_page_limit (None = unbounded).
    """
    resolved_limit = parse_int(limit, default=settings.default_page_limit, minimum=1)
    cap = max_limit if max_limit is not None else settings.max_page_limit
    if cap is not None:
        resolved_limit = min(resolved_limit, cap)

    return QueryDescriptor(
        search_term=_coerce_search(search),
        sort_field=_coerce_enum(SortField, sort_field, DEFAULT_SORT_FIELD),
        sort_direction=_coerce_enum(SortDirection, sort_direction, DEFAULT_SORT_DIRECTION),
        page=parse_int(page, default=0, minimum=0),
        limit=resolved_limit,
    )


def build_export_query(search: Any = None, max_export: Any = None) -> ExportDescriptor:
    """Normalise raw export parameters into an ExportDescriptor. Never raises."""
    return ExportDescriptor(
        search_term=_coerce_search(search),
        max_export=parse_int(
            max_export, default=settings.default_max_export, minimum=1,
        ),
    )


def parse_record_id(raw: Any) -> int:
    """
    Parse a record identifier strictly.

    Raises:
        InvalidIdentifierError: `raw` is not an integer ("abc", "1.5", "").
    """
    if isinstance(raw, bool):
        raise InvalidIdentifierError(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and _STRICT_INT_RE.match(raw):
        try:
            return int(raw)
        except ValueError:
            # digit strings past the interpreter's int conversion limit
            raise InvalidIdentifierError(raw) from None
    raise InvalidIdentifierError(raw)


def parse_int(value: Any, *, default: int, minimum: int) -> int:
    """
    Lenient integer parse with a fallback.

    Accepts ints and strings with a leading integer ("12abc" → 12,
    "3.9" → 3). Anything unparseable (including digit runs too long for
    `int()`), or below `minimum`, yields `default`.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        parsed = value
    else:
        match = _LEADING_INT_RE.match(str(value))
        if match is None:
            return default
        try:
            parsed = int(match.group(1))
        except ValueError:
            return default
    return parsed if parsed >= minimum else default


def _coerce_search(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _coerce_enum(enum_cls: type[enum.Enum], value: Any, default: enum.Enum) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return default
