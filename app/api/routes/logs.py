from fastapi import APIRouter, Depends

from app.api.deps import get_log_store
from app.services.log_service import LogStore

router = APIRouter(tags=["logs"])


@router.get("/logs")
def get_logs(page: int = 1, limit: int = 10, level: str | None = None, action: str | None = None,
             resource: str | None = None, user: str | None = None, search: str | None = None,
             sortBy: str = "timestamp", sortOrder: str = "desc",
             log_store: LogStore = Depends(get_log_store)):
    result = log_store.query(
        page=page, limit=limit, level=level, action=action, resource=resource,
        user=user, search=search, sort_by=sortBy, sort_order=sortOrder,
    )
    return {
        "data": [e.to_dict() for e in result.logs],
        "pagination": {
            "total": result.total,
            "page": result.page,
            "limit": result.limit,
            "totalPages": result.total_pages,
        },
    }
