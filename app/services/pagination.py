import math

from sqlalchemy.orm import Query

MAX_LIMIT = 200


def clamp(page: int, limit: int) -> tuple[int, int]:
    return max(page, 1), min(max(limit, 1), MAX_LIMIT)


def paginate(query: Query, page: int, limit: int) -> tuple[list, int]:
    """Return (rows of the requested page, total rows). Pages past the end are empty."""
    page, limit = clamp(page, limit)
    total = query.order_by(None).count()
    rows = query.limit(limit).offset((page - 1) * limit).all()
    return rows, total


def pagination_meta(total: int, page: int, limit: int) -> dict:
    page, limit = clamp(page, limit)
    return {"total": total, "page": page, "limit": limit, "totalPages": math.ceil(total / limit)}
