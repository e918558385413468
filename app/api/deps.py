from fastapi import Depends, HTTPException, Request
from loguru import logger
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.permissions import Capability, has_permission
from app.core.security import resolve_user_id
from app.models.user import User
from app.services.log_service import LogStore
from app.services.user_service import granted_codes


def get_log_store(request: Request) -> LogStore:
    return request.app.state.log_store


def get_optional_user_id(request: Request) -> str | None:
    """IdP subject of the caller, or None. A bad token counts as anonymous here."""
    try:
        return resolve_user_id(request.headers.get("authorization"))
    except Exception as e:
        logger.warning(f"Ignoring invalid bearer token: {e}")
        return None


def get_user_id(request: Request) -> str:
    try:
        user_id = resolve_user_id(request.headers.get("authorization"))
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid token")
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


def get_current_user(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.external_id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def require_permission(capability: Capability):
    def _guard(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> User:
        if not has_permission(user.role, capability, granted_codes(db, user.id)):
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _guard
