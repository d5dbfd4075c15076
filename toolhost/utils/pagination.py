"""Pagination and filtering helpers for list-style tool results."""
from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")

DEFAULT_COUNT = 50
MAX_COUNT = 1000


@dataclass(slots=True)
class PagedResult(Generic[T]):
    items: List[T]
    total: int
    offset: int
    count: int
    has_more: bool
    next_offset: Optional[int]


def paginate(items: Iterable[T], offset: int = 0, count: int = DEFAULT_COUNT) -> PagedResult[T]:
    """Slice *items* into a page, clamping the window to sane bounds."""

    if offset < 0:
        offset = 0
    if count <= 0:
        count = DEFAULT_COUNT
    if count > MAX_COUNT:
        count = MAX_COUNT

    materialized = list(items)
    total = len(materialized)
    page = materialized[offset : offset + count]
    has_more = offset + len(page) < total
    return PagedResult(
        items=page,
        total=total,
        offset=offset,
        count=len(page),
        has_more=has_more,
        next_offset=offset + count if has_more else None,
    )


def filter_items(
    items: Iterable[T], pattern: Optional[str], key: Callable[[T], Optional[str]]
) -> List[T]:
    """Filter by glob (``*``/``?``) or, without wildcards, by substring.

    Both forms are case-insensitive; an empty pattern or ``*`` keeps everything.
    """

    materialized = list(items)
    if pattern is None or not pattern.strip() or pattern.strip() == "*":
        return materialized

    pattern = pattern.strip()
    if "*" in pattern or "?" in pattern:
        regex = re.compile(fnmatch.translate(pattern), re.IGNORECASE)
        return [item for item in materialized if regex.match(key(item) or "")]

    needle = pattern.casefold()
    return [item for item in materialized if needle in (key(item) or "").casefold()]


__all__ = ["DEFAULT_COUNT", "MAX_COUNT", "PagedResult", "filter_items", "paginate"]
