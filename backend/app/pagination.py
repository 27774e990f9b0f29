# Overview: Pagination and chart scaling helpers for report views.

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


class PageOutOfRangeError(IndexError):
    """Raised for a page number or page size below 1."""


class EmptySeriesError(ValueError):
    """Raised when a chart scale is requested for a series with no values."""


def paginate(items: Sequence[T], page_number: int, page_size: int = DEFAULT_PAGE_SIZE) -> list[T]:
    """
    Slice one 1-indexed page out of an ordered sequence.

    A page past the end is empty rather than an error; the last page may be short.
    """
    if page_number < 1:
        raise PageOutOfRangeError(f"page_number must be >= 1 (got {page_number})")
    if page_size < 1:
        raise PageOutOfRangeError(f"page_size must be >= 1 (got {page_size})")

    start = (page_number - 1) * page_size
    if start >= len(items):
        return []
    end = min(start + page_size, len(items))
    return list(items[start:end])


def page_count(data_size: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    if data_size <= 0:
        return 0
    return (data_size + page_size - 1) // page_size


def page_options(data_size: int, page_size: int = DEFAULT_PAGE_SIZE) -> list[str]:
    """Page selector labels: "Page 1" .. "Page N"."""
    return [f"Page {i}" for i in range(1, page_count(data_size, page_size) + 1)]


def chart_scale(values: Iterable[int | float | Decimal]) -> int:
    """
    Axis scale for profit/loss charts: max value / 100 (half-up) + 2.

    chart_scale([10, 250, 80]) == 5
    """
    values = list(values)
    if not values:
        raise EmptySeriesError("cannot compute a chart scale for an empty series")

    peak = max(Decimal(str(v)) for v in values)
    return int((peak / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)) + 2
