from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_user
from app.models.building import Building, Floor, Room
from app.models.ticket import Ticket, TicketComment
from app.models.user import User
from app.schemas.ticket import CommentIn, TicketIn, TicketPatch
from app.services import ticket_service

router = APIRouter(tags=["tickets"])


def _iso(dt):
    return dt.isoformat() if dt else None


def ticket_dict(t: Ticket) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "status": t.status,
        "priority": t.priority,
        "ticketType": t.ticket_type,
        "roomId": t.room_id,
        "createdById": t.created_by_id,
        "assignedToId": t.assigned_to_id,
        "moderatorId": t.moderator_id,
        "resolvedAt": _iso(t.resolved_at),
        "createdAt": _iso(t.created_at),
        "updatedAt": _iso(t.updated_at),
    }


def comment_dict(c: TicketComment) -> dict:
    return {
        "id": c.id,
        "ticketId": c.ticket_id,
        "authorId": c.author_id,
        "content": c.content,
        "isPrivate": c.is_private,
        "createdAt": _iso(c.created_at),
    }


@router.get("/tickets")
def list_tickets(status: str | None = None, createdByMe: bool = False, assignedToMe: bool = False,
                 db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    tickets = ticket_service.list_tickets(db, me, status=status, created_by_me=createdByMe, assigned_to_me=assignedToMe)
    return [ticket_dict(t) for t in tickets]


@router.post("/tickets", status_code=201)
def create_ticket(body: TicketIn, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    return ticket_dict(ticket_service.create_ticket(db, me, body))


@router.get("/tickets/{ticket_id}")
def get_ticket(ticket_id: str, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    t = ticket_service.get_accessible(db, me, ticket_id)
    d = ticket_dict(t)
    room = db.get(Room, t.room_id) if t.room_id else None
    if room:
        floor = db.get(Floor, room.floor_id)
        building = db.get(Building, floor.building_id) if floor else None
        d["room"] = {
            "id": room.id, "number": room.number, "name": room.name,
            "floor": {"number": floor.number, "building": {"name": building.name} if building else None} if floor else None,
        }
    else:
        d["room"] = None
    d["comments"] = [comment_dict(c) for c in ticket_service.visible_comments(db, me, t)]
    return d


@router.patch("/tickets/{ticket_id}")
def patch_ticket(ticket_id: str, body: TicketPatch, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    return ticket_dict(ticket_service.update_ticket(db, me, ticket_id, body))


@router.get("/tickets/{ticket_id}/comments")
def list_comments(ticket_id: str, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    t = ticket_service.get_accessible(db, me, ticket_id)
    return [comment_dict(c) for c in ticket_service.visible_comments(db, me, t)]


@router.post("/tickets/{ticket_id}/comments", status_code=201)
def add_comment(ticket_id: str, body: CommentIn, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    t = ticket_service.get_accessible(db, me, ticket_id)
    return comment_dict(ticket_service.add_comment(db, me, t, body))
