"""Ticket access and update rules.

Admins and moderators see every ticket. Everyone else sees the tickets they
created or are assigned to. Technicians (stored role ``technician``) may change
the status only of tickets assigned to them; the plain ``manager`` role is
treated like a moderator.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from fastapi import HTTPException
from loguru import logger
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.permissions import can_manage, is_admin
from app.models.ticket import Ticket, TicketComment
from app.models.user import User
from app.schemas.ticket import CommentIn, TicketIn, TicketPatch


def _raw(role: str | None) -> str:
    return (role or "").strip().lower()


def is_technician_role(role: str | None) -> bool:
    return _raw(role) == "technician"


def sees_all_tickets(role: str | None) -> bool:
    return can_manage(role) and not is_technician_role(role)


def can_set_moderator(role: str | None) -> bool:
    return is_admin(role) or (can_manage(role) and not is_technician_role(role))


def can_access(user: User, ticket: Ticket) -> bool:
    return sees_all_tickets(user.role) or user.id in (ticket.created_by_id, ticket.assigned_to_id)


def get_accessible(db: Session, user: User, ticket_id: str) -> Ticket:
    t = db.get(Ticket, ticket_id)
    if not t:
        raise HTTPException(status_code=404, detail="Ticket not found")
    if not can_access(user, t):
        raise HTTPException(status_code=403, detail="Access denied")
    return t


def list_tickets(db: Session, user: User, status: str | None = None,
                 created_by_me: bool = False, assigned_to_me: bool = False) -> list[Ticket]:
    q = db.query(Ticket)
    if not sees_all_tickets(user.role):
        q = q.filter(or_(Ticket.created_by_id == user.id, Ticket.assigned_to_id == user.id))
    if status:
        q = q.filter(Ticket.status == status)
    if created_by_me:
        q = q.filter(Ticket.created_by_id == user.id)
    if assigned_to_me:
        q = q.filter(Ticket.assigned_to_id == user.id)
    return q.order_by(Ticket.created_at.desc()).all()


def create_ticket(db: Session, user: User, body: TicketIn) -> Ticket:
    t = Ticket(
        id=str(uuid.uuid4()),
        title=body.title,
        description=body.description,
        status="OPEN",
        priority=body.priority,
        ticket_type=body.ticketType,
        room_id=body.roomId,
        created_by_id=user.id,
    )
    db.add(t)
    db.commit()
    logger.info(f"Ticket created: {t.id}")
    return t


def update_ticket(db: Session, user: User, ticket_id: str, body: TicketPatch) -> Ticket:
    t = db.get(Ticket, ticket_id)
    if not t:
        raise HTTPException(status_code=404, detail="Ticket not found")

    if not can_manage(user.role) and t.created_by_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    if body.status and is_technician_role(user.role) and t.assigned_to_id != user.id:
        raise HTTPException(status_code=403, detail="Technicians can only update tickets assigned to them")

    sent = body.model_fields_set
    if body.status:
        if body.status == "RESOLVED" and t.status != "RESOLVED":
            t.resolved_at = datetime.now(timezone.utc)
        t.status = body.status
    if body.priority:
        t.priority = body.priority
    # assignment changes from other roles are ignored, not rejected
    if "assignedToId" in sent and can_manage(user.role):
        t.assigned_to_id = body.assignedToId
    if "moderatorId" in sent and can_set_moderator(user.role):
        t.moderator_id = body.moderatorId
    db.commit()
    return t


def visible_comments(db: Session, user: User, ticket: Ticket) -> list[TicketComment]:
    q = db.query(TicketComment).filter(TicketComment.ticket_id == ticket.id)
    privileged = can_manage(user.role) or user.id in (ticket.moderator_id, ticket.assigned_to_id)
    if not privileged:
        q = q.filter(or_(TicketComment.is_private.is_(False), TicketComment.author_id == user.id))
    return q.order_by(TicketComment.created_at.desc()).all()


def add_comment(db: Session, user: User, ticket: Ticket, body: CommentIn) -> TicketComment:
    if body.isPrivate and not can_manage(user.role):
        raise HTTPException(status_code=403, detail="Regular users cannot create private comments")
    c = TicketComment(
        id=str(uuid.uuid4()),
        ticket_id=ticket.id,
        author_id=user.id,
        content=body.content,
        is_private=body.isPrivate,
    )
    db.add(c)
    db.commit()
    return c
