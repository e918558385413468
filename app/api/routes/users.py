from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_user, get_optional_user_id, get_user_id, require_permission
from app.api.routes.schedules import schedule_dict
from app.core.permissions import Capability, Role, effective_permissions
from app.models.building import Room
from app.models.schedule import Schedule
from app.models.user import User
from app.schemas.schedule import UserScheduleIn
from app.schemas.user import BulkDeleteIn, BulkRoleIn, UserIn, UserPatch, UserPermissionsIn
from app.services.pagination import paginate, pagination_meta
from app.services.schedule_service import create_schedule
from app.services.user_service import (
    bulk_update_role, create_user, delete_users, granted_codes, set_user_permissions, update_user,
)

router = APIRouter(tags=["users"])


def user_dict(db: Session, u: User) -> dict:
    extra = granted_codes(db, u.id)
    return {
        "id": u.id,
        "externalId": u.external_id,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "username": u.username,
        "email": u.email,
        "profileImageUrl": u.profile_image_url,
        "role": u.role,
        "permissions": extra,
        "effectivePermissions": sorted(c.value for c in effective_permissions(u.role, extra)),
        "createdAt": u.created_at.isoformat() if u.created_at else None,
        "updatedAt": u.updated_at.isoformat() if u.updated_at else None,
    }


def _get_user(db: Session, user_id: str) -> User:
    u = db.get(User, user_id)
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    return u


@router.get("/users")
def list_users(role: str | None = None, search: str | None = None, page: int = 1, limit: int = 50,
               db: Session = Depends(get_db),
               caller: str = Depends(get_user_id)):
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    if search:
        s = f"%{search.lower()}%"
        q = q.filter(or_(
            func.lower(User.first_name).like(s),
            func.lower(User.last_name).like(s),
            func.lower(User.email).like(s),
            func.lower(User.username).like(s),
        ))
    users, total = paginate(q.order_by(User.created_at.desc()), page, limit)
    return {
        "success": True,
        "data": [user_dict(db, u) for u in users],
        "pagination": pagination_meta(total, page, limit),
    }


@router.post("/users", status_code=201)
def create(body: UserIn, db: Session = Depends(get_db)):
    u = create_user(
        db,
        first_name=body.firstName,
        last_name=body.lastName,
        username=body.username,
        email=str(body.email) if body.email else None,
        role=body.role,
        external_id=body.externalId,
    )
    return user_dict(db, u)


@router.post("/users/bulk-update")
def bulk_update(body: BulkRoleIn, db: Session = Depends(get_db),
                me: User = Depends(require_permission(Capability.USER_UPDATE))):
    count = bulk_update_role(db, body.userIds, body.role)
    return {"message": f"{count} users updated successfully to {body.role} role"}


@router.post("/users/bulk-delete")
def bulk_delete(body: BulkDeleteIn, db: Session = Depends(get_db),
                me: User = Depends(require_permission(Capability.USER_DELETE))):
    count = delete_users(db, body.userIds)
    return {"message": f"{count} users deleted successfully"}


@router.get("/users/current")
def current_user(me: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_dict(db, me)


@router.get("/users/{user_id}")
def get_user(user_id: str, db: Session = Depends(get_db)):
    return user_dict(db, _get_user(db, user_id))


@router.patch("/users/{user_id}")
def patch_user(user_id: str, body: UserPatch, db: Session = Depends(get_db)):
    fields = {
        "firstName": "first_name", "lastName": "last_name", "username": "username",
        "email": "email", "role": "role", "profileImageUrl": "profile_image_url",
    }
    changes = {}
    for field, attr in fields.items():
        value = getattr(body, field)
        if value is not None:
            changes[attr] = str(value) if field in ("email", "profileImageUrl") else value
    u = update_user(db, user_id, changes)
    return user_dict(db, u)


@router.delete("/users/{user_id}")
def delete_user(user_id: str, db: Session = Depends(get_db)):
    delete_users(db, [_get_user(db, user_id).id])
    return {"success": True}


@router.get("/users/{user_id}/permissions")
def get_user_permissions(user_id: str, db: Session = Depends(get_db)):
    u = _get_user(db, user_id)
    extra = granted_codes(db, u.id)
    return {
        "userId": u.id,
        "role": u.role,
        "permissions": extra,
        "effectivePermissions": sorted(c.value for c in effective_permissions(u.role, extra)),
    }


@router.put("/users/{user_id}/permissions")
def put_user_permissions(user_id: str, body: UserPermissionsIn, db: Session = Depends(get_db),
                         me: User = Depends(require_permission(Capability.USER_UPDATE))):
    set_user_permissions(db, user_id, body.permissions)
    return {"success": True, "user": user_dict(db, _get_user(db, user_id))}


@router.get("/users/{user_id}/schedules")
def get_user_schedules(user_id: str, db: Session = Depends(get_db)):
    _get_user(db, user_id)
    rows = (
        db.query(Schedule, Room)
        .outerjoin(Room, Room.id == Schedule.room_id)
        .filter(Schedule.user_id == user_id)
        .order_by(Schedule.day_of_week.asc(), Schedule.start_time.asc())
        .all()
    )
    return [schedule_dict(s, r=r) for s, r in rows]


@router.post("/users/{user_id}/schedules", status_code=201)
def create_user_schedule(user_id: str, body: UserScheduleIn, db: Session = Depends(get_db)):
    _get_user(db, user_id)
    s = create_schedule(db, body, user_id=user_id)
    return schedule_dict(s)


@router.get("/auth/check-role")
def check_role(role: str | None = None, db: Session = Depends(get_db),
               caller: str | None = Depends(get_optional_user_id)):
    if not role:
        raise HTTPException(status_code=400, detail="Role parameter is required")
    if not caller:
        return {"hasRole": False}
    u = db.query(User).filter(User.external_id == caller).first()
    mine = Role.parse(u.role) if u else None
    if mine is None:
        return {"hasRole": False}
    return {"hasRole": any(Role.parse(r) is mine for r in role.split(","))}
