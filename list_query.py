"""
Listing query construction for GET /employees.

Raw query-string values go through two steps:

  1. parse_list_params()  -- validate and type the inputs; returns ParseOk or ParseError
  2. build_list_query()   -- turn ListParams into filter clauses, a sort and a page window

The store (db.py) only ever sees the typed clauses, never the raw strings.
"""

import math
import re
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict

from config import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_LIMIT,
    DEFAULT_SORT_FIELD,
    MAX_FILTER_LENGTH,
    MAX_PAGE_LIMIT,
    SORTABLE_FIELDS,
)

SEARCH_FIELDS = ("name", "skills", "designation", "address")

# Query-string key -> record field, for the substring filters.
TEXT_FILTERS = {
    "filterName": "name",
    "filterSkills": "skills",
    "filterAddress": "address",
    "filterDesignation": "designation",
}

SEARCH_TOO_LONG = "Search query too long"
FILTERS_TOO_LONG = "Filter values too long"
INVALID_AGE_FILTER = "Invalid age filter value"
INVALID_CHARACTERS = "Search and filter values cannot contain null characters"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# Postgres bigint ceiling; OFFSET (page - 1) * limit must stay within it.
_MAX_OFFSET = 2**63 - 1


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ListParams(_Frozen):
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_LIMIT
    search: str = ""
    sort_field: str = ""
    sort_order: str = ""
    text_filters: tuple[tuple[str, str], ...] = ()  # (field, text), non-empty text only
    filter_age: int | None = None


class ParseOk(_Frozen):
    ok: Literal[True] = True
    params: ListParams


class ParseError(_Frozen):
    ok: Literal[False] = False
    message: str


ParseResult = ParseOk | ParseError


class Contains(_Frozen):
    """Case-insensitive literal substring match on one field."""

    field: str
    text: str


class AnyContains(_Frozen):
    """Substring match on any of several fields (the free-text search group)."""

    fields: tuple[str, ...]
    text: str


class Equals(_Frozen):
    field: str
    value: int


Clause = Contains | AnyContains | Equals


class Sort(_Frozen):
    field: str = DEFAULT_SORT_FIELD
    descending: bool = True


class ListQuery(_Frozen):
    clauses: tuple[Clause, ...] = ()
    sort: Sort = Sort()
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def _parse_int(raw: str | None, default: int) -> int:
    """Leading-integer parse: "12abc" -> 12, "3.9" -> 3. Missing, garbage or 0 -> default."""
    match = _LEADING_INT.match(raw or "")
    if not match:
        return default
    try:
        value = int(match.group(1))
    except ValueError:
        # more digits than int() will convert
        return default
    return value or default


def parse_age(raw: str) -> int | None:
    """Return the age if *raw* is exactly the canonical text of a non-negative integer."""
    try:
        value = int(raw)
    except ValueError:
        return None
    if value < 0 or str(value) != raw:
        return None
    return value


def parse_list_params(raw: Mapping[str, str | None]) -> ParseResult:
    """Validate raw listing parameters. The first failing rule wins."""
    page = max(1, _parse_int(raw.get("page"), DEFAULT_PAGE))
    limit = max(1, min(MAX_PAGE_LIMIT, _parse_int(raw.get("limit"), DEFAULT_PAGE_LIMIT)))
    page = min(page, _MAX_OFFSET // limit + 1)

    search = raw.get("search") or ""
    if len(search) > MAX_FILTER_LENGTH:
        return ParseError(message=SEARCH_TOO_LONG)

    texts = {key: raw.get(key) or "" for key in TEXT_FILTERS}
    if any(len(text) > MAX_FILTER_LENGTH for text in texts.values()):
        return ParseError(message=FILTERS_TOO_LONG)

    if "\x00" in search or any("\x00" in text for text in texts.values()):
        return ParseError(message=INVALID_CHARACTERS)

    filter_age = None
    raw_age = raw.get("filterAge") or ""
    if raw_age:
        filter_age = parse_age(raw_age)
        if filter_age is None:
            return ParseError(message=INVALID_AGE_FILTER)

    return ParseOk(
        params=ListParams(
            page=page,
            limit=limit,
            search=search,
            sort_field=raw.get("sortField") or "",
            sort_order=raw.get("sortOrder") or "",
            text_filters=tuple((TEXT_FILTERS[key], text) for key, text in texts.items() if text),
            filter_age=filter_age,
        )
    )


def select_sort(sort_field: str, sort_order: str) -> Sort:
    if sort_field in SORTABLE_FIELDS:
        return Sort(field=sort_field, descending=sort_order == "desc")
    return Sort()


def build_clauses(params: ListParams) -> tuple[Clause, ...]:
    clauses: list[Clause] = []
    if params.search:
        clauses.append(AnyContains(fields=SEARCH_FIELDS, text=params.search))
    for field, text in params.text_filters:
        clauses.append(Contains(field=field, text=text))
    if params.filter_age is not None:
        clauses.append(Equals(field="age", value=params.filter_age))
    return tuple(clauses)


def build_list_query(params: ListParams) -> ListQuery:
    return ListQuery(
        clauses=build_clauses(params),
        sort=select_sort(params.sort_field, params.sort_order),
        page=params.page,
        limit=params.limit,
    )


def total_pages(total: int, limit: int) -> int:
    """Page count for *total* matches; an empty result still has one page."""
    return max(1, math.ceil(total / limit))
