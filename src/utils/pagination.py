"""Offset pagination shared by every listing."""

from typing import Any, List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query


def paginate(query: Query, page: int, limit: int) -> Tuple[List[Any], int]:
    """Slice a query into one page.

    ``total`` always counts the full filtered set. A ``limit`` of 0 returns
    the unsliced set.

    Args:
        query: Filtered and ordered query.
        page: 1-based page number.
        limit: Page size, 0 for no slicing.

    Returns:
        Tuple of (rows, total).
    """
    total = query.order_by(None).count()
    if page > 0 and limit > 0:
        query = query.offset((page - 1) * limit).limit(limit)
    return query.all(), total


def contains_ci(column, term: str):
    """Case-insensitive substring filter for ``column``."""
    return func.lower(column).contains(term.lower(), autoescape=True)
