import math
from typing import Any


def wants_pagination(page: int | None, limit: int | None) -> bool:
    """Pagination applies only when both page and limit are positive."""
    return bool(page and limit and page > 0 and limit > 0)


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNextPage": page * limit < total,
        "hasPreviousPage": page > 1,
    }
