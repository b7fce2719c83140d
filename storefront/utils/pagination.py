# storefront/utils/pagination.py
import math

from storefront.utils.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def clamp(page: int | None, limit: int | None) -> tuple[int, int, int]:
    """Returns (page, limit, offset) with page >= 1 and 1 <= limit <= MAX_PAGE_SIZE."""
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
    return page, limit, (page - 1) * limit


def pagination(total: int, page: int, limit: int) -> dict:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit) if limit else 0,
    }
