"""
Query semantics for the entity store.

Predicate matching, sort specs and pagination, all as pure functions over
plain record dicts. The store composes them; nothing here touches store state.

Matching rule, per predicate field (all fields must match):
- both values are strings: case-insensitive substring containment
- otherwise: strict equality (booleans only equal booleans, numbers compare
  numerically, no cross-type coercion)
- a field missing from the record never matches
"""

from __future__ import annotations

import math
import unicodedata
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from numbers import Number
from typing import Any

from pydantic import BaseModel, Field

from patientflow.core.errors import InvalidQueryError

Record = dict[str, Any]

_MISSING = object()


# =============================================================================
# Matching
# =============================================================================


def strict_equals(expected: Any, actual: Any) -> bool:
    """
    Compare two values without type coercion.

    ``True`` does not equal ``1`` and ``"42"`` does not equal ``42``;
    ``42`` does equal ``42.0``.
    """
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and expected is actual
    if isinstance(expected, Number) and isinstance(actual, Number):
        return expected == actual
    if type(expected) is not type(actual):
        return False
    return bool(expected == actual)


def field_matches(expected: Any, actual: Any) -> bool:
    """Match a single predicate value against a record value."""
    if actual is _MISSING:
        return False
    if isinstance(expected, str) and isinstance(actual, str):
        return expected.casefold() in actual.casefold()
    return strict_equals(expected, actual)


def matches(record: Mapping[str, Any], query: Mapping[str, Any] | None) -> bool:
    """
    Check whether a record satisfies every field of a predicate.

    An empty or missing predicate matches everything.
    """
    if not query:
        return True
    return all(
        field_matches(expected, record.get(key, _MISSING)) for key, expected in query.items()
    )


def filter_records(
    records: Iterable[Mapping[str, Any]], query: Mapping[str, Any] | None
) -> list[Record]:
    """Return the records matching ``query``, preserving order."""
    return [dict(record) for record in records if matches(record, query)]


# =============================================================================
# Sorting
# =============================================================================


@dataclass(frozen=True)
class SortField:
    """A sort spec: field name plus direction."""

    field: str
    descending: bool = False

    @classmethod
    def parse(cls, sort_str: str) -> SortField:
        """
        Parse a sort string.

        Examples:
            - "name" -> SortField(field="name", descending=False)
            - "-admission_date" -> SortField(field="admission_date", descending=True)
        """
        descending = sort_str.startswith("-")
        if descending:
            sort_str = sort_str[1:]
        return cls(field=sort_str, descending=descending)


def _char_rank(ch: str) -> int:
    category = unicodedata.category(ch)
    if ch.isspace():
        return 0
    return {"P": 1, "S": 2, "N": 3}.get(category[0], 4)


def collation_key(value: Any) -> tuple[tuple[tuple[int, str], ...], str, str]:
    """
    Sort key approximating locale-aware string comparison.

    Falsy values sort as the empty string. Primary order ignores accents and
    case and ranks character classes the way ICU root collation does:
    whitespace, then punctuation, then symbols, then digits, then letters.
    Accents break ties, then case (lowercase first). Within a class
    characters compare by code point, so this is an approximation of
    ``localeCompare`` rather than a full UCA implementation.
    """
    text = str(value) if value else ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    primary = tuple((_char_rank(ch), ch) for ch in base)
    return (primary, decomposed.casefold(), text.swapcase())


def sort_records(records: Sequence[Record], sort: str | SortField | None) -> list[Record]:
    """
    Sort records by one field.

    Stable in both directions: records with equal keys keep their
    relative order.
    """
    if not sort:
        return list(records)
    spec = sort if isinstance(sort, SortField) else SortField.parse(sort)
    return sorted(
        records,
        key=lambda record: collation_key(record.get(spec.field)),
        reverse=spec.descending,
    )


# =============================================================================
# Pagination
# =============================================================================


class Pagination(BaseModel):
    """Page position and totals for a paginated result."""

    page: int
    limit: int
    total: int
    total_pages: int = Field(serialization_alias="totalPages")


class Page(BaseModel):
    """A page of records plus its pagination info."""

    data: list[dict[str, Any]]
    pagination: Pagination

    def to_dict(self) -> dict[str, Any]:
        """The ``{"data": [...], "pagination": {...}}`` envelope with camelCase totals."""
        return self.model_dump(by_alias=True)


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for ``total`` items; 0 when there are none."""
    return math.ceil(total / limit)


def paginate(records: Sequence[Record], page: int = 1, limit: int = 10) -> Page:
    """
    Slice one 1-indexed page out of ``records``.

    Pages past the end yield empty ``data`` with the real total.

    Raises:
        InvalidQueryError: If ``page`` or ``limit`` is below 1
    """
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise InvalidQueryError(f"page must be a positive integer, got {page!r}")
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise InvalidQueryError(f"limit must be a positive integer, got {limit!r}")

    start = (page - 1) * limit
    total = len(records)
    return Page(
        data=list(records[start : start + limit]),
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages(total, limit),
        ),
    )
