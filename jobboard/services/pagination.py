"""Page arithmetic for list endpoints."""

from typing import Any, Tuple


def get_page(value: Any) -> int:
    """Page number from a query value; anything unusable is page 1."""
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def paginate(page: int, per_page: int) -> Tuple[int, int]:
    """Return (skip, limit) for a 1-based page of `per_page` items."""
    return per_page * (page - 1), per_page
