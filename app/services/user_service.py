from __future__ import annotations

import uuid

from loguru import logger
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import BusinessRuleError, ConflictError, NotFoundError
from app.core.permissions import PERMISSION_DISPLAY_NAMES, Capability, Role
from app.models.user import Permission, User, UserPermission


def normalize_role(role: str | None, default: Role = Role.MEMBER) -> str:
    """Lowercased role name, or the default when it is not a known role or alias.

    Legacy names (technician, moderator, user) are stored as given; the ticket
    workflow still tells technicians and moderators apart.
    """
    if Role.parse(role) is None:
        return default.value
    return role.strip().lower()


def ensure_permission_rows(db: Session) -> dict[str, Permission]:
    """Make sure every capability has a row in `permissions`; returns them by code."""
    rows = {p.code: p for p in db.query(Permission).all()}
    for cap in Capability:
        if cap.value not in rows:
            p = Permission(
                id=str(uuid.uuid4()),
                code=cap.value,
                name=PERMISSION_DISPLAY_NAMES.get(cap, cap.value),
                description="",
            )
            db.add(p)
            rows[cap.value] = p
    db.flush()
    return rows


def granted_codes(db: Session, user_id: str) -> list[str]:
    rows = (
        db.query(Permission.code)
        .join(UserPermission, UserPermission.permission_id == Permission.id)
        .filter(UserPermission.user_id == user_id)
        .order_by(Permission.code.asc())
        .all()
    )
    return [r[0] for r in rows]


def set_user_permissions(db: Session, user_id: str, codes: list[str]) -> list[str]:
    """Replace a user's extra grants. Codes that are not capabilities are ignored."""
    if not db.get(User, user_id):
        raise NotFoundError("User not found")
    wanted = {c.value for c in (Capability.parse(code) for code in codes) if c is not None}
    ignored = sorted(set(codes) - wanted)
    if ignored:
        logger.warning(f"Ignoring unknown permission codes for user {user_id}: {ignored}")

    rows = ensure_permission_rows(db)
    db.query(UserPermission).filter(UserPermission.user_id == user_id).delete(synchronize_session=False)
    for code in sorted(wanted):
        db.add(UserPermission(id=str(uuid.uuid4()), user_id=user_id, permission_id=rows[code].id))
    db.commit()
    return granted_codes(db, user_id)


def _check_unique(db: Session, username: str | None, email: str | None, external_id: str | None,
                  exclude_id: str | None = None) -> None:
    clauses = []
    if username:
        clauses.append(User.username == username)
    if email:
        clauses.append(User.email == email)
    if external_id:
        clauses.append(User.external_id == external_id)
    if not clauses:
        return
    q = db.query(User).filter(or_(*clauses))
    if exclude_id:
        q = q.filter(User.id != exclude_id)
    if q.first():
        raise ConflictError("User already exists with that username or email")


def create_user(db: Session, *, first_name=None, last_name=None, username=None, email=None,
                role: str | None = None, external_id: str | None = None,
                profile_image_url: str | None = None) -> User:
    email = email.lower() if email else None
    _check_unique(db, username, email, external_id)
    u = User(
        id=str(uuid.uuid4()),
        # users created locally get a placeholder subject until the IdP links them
        external_id=external_id or f"local_{uuid.uuid4().hex}",
        first_name=first_name,
        last_name=last_name,
        username=username,
        email=email,
        profile_image_url=profile_image_url,
        role=normalize_role(role),
    )
    db.add(u)
    db.commit()
    logger.info(f"User created: {u.id} ({u.role})")
    return u


def update_user(db: Session, user_id: str, changes: dict) -> User:
    """Apply a partial update. Keys are model attribute names."""
    u = db.get(User, user_id)
    if not u:
        raise NotFoundError("User not found")
    if changes.get("email"):
        changes["email"] = changes["email"].lower()
    if changes.get("username") and changes["username"] != u.username:
        if db.query(User).filter(User.username == changes["username"], User.id != u.id).first():
            raise ConflictError("Username already taken")
    if changes.get("email") and changes["email"] != u.email:
        if db.query(User).filter(User.email == changes["email"], User.id != u.id).first():
            raise ConflictError("Email already taken")
    if "role" in changes:
        changes["role"] = normalize_role(changes["role"])
    for attr, value in changes.items():
        setattr(u, attr, value)
    db.commit()
    return u


def bulk_update_role(db: Session, user_ids: list[str], role: str) -> int:
    if not user_ids:
        raise BusinessRuleError("No user IDs provided")
    count = (
        db.query(User)
        .filter(User.id.in_(user_ids))
        .update({User.role: normalize_role(role)}, synchronize_session=False)
    )
    db.commit()
    logger.info(f"Bulk role change to {role}: {count} users")
    return count


def delete_users(db: Session, user_ids: list[str]) -> int:
    """Delete all of ``user_ids`` or none of them."""
    wanted = list(dict.fromkeys(user_ids))
    found = {uid for (uid,) in db.query(User.id).filter(User.id.in_(wanted)).all()}
    missing = [uid for uid in wanted if uid not in found]
    if missing:
        raise NotFoundError(f"Users with ids {', '.join(missing)} not found")
    try:
        db.query(UserPermission).filter(UserPermission.user_id.in_(wanted)).delete(synchronize_session=False)
        count = db.query(User).filter(User.id.in_(wanted)).delete(synchronize_session=False)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"User delete blocked by related records: {e.orig}")
        raise ConflictError("Cannot delete users that still have tickets or comments")
    logger.info(f"Deleted {count} users")
    return count
