from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.models.building import Room
from app.models.schedule import Schedule
from app.models.user import User
from app.schemas.schedule import SchedulePatch, UserScheduleIn


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def find_conflict(db: Session, room_id: str, day_of_week: str, start: datetime, end: datetime,
                  exclude_id: str | None = None) -> Schedule | None:
    """First schedule in the same room and weekday whose time range touches [start, end]."""
    q = db.query(Schedule).filter(
        Schedule.room_id == room_id,
        Schedule.day_of_week == day_of_week,
        Schedule.start_time <= end,
        Schedule.end_time >= start,
    )
    if exclude_id:
        q = q.filter(Schedule.id != exclude_id)
    return q.first()


def create_schedule(db: Session, body: UserScheduleIn, user_id: str | None = None) -> Schedule:
    owner_id = user_id or getattr(body, "userId", None)
    if not db.get(User, owner_id):
        raise NotFoundError("User not found")
    if not db.get(Room, body.roomId):
        raise NotFoundError("Room not found")

    start, end = as_utc(body.startTime), as_utc(body.endTime)
    if find_conflict(db, body.roomId, body.dayOfWeek, start, end):
        raise ConflictError("Schedule conflicts with an existing booking")

    s = Schedule(
        id=str(uuid.uuid4()),
        title=body.title,
        description=body.description,
        start_time=start,
        end_time=end,
        day_of_week=body.dayOfWeek,
        user_id=owner_id,
        room_id=body.roomId,
    )
    db.add(s)
    db.commit()
    return s


def update_schedule(db: Session, schedule_id: str, body: SchedulePatch) -> Schedule:
    s = db.get(Schedule, schedule_id)
    if not s:
        raise NotFoundError("Schedule not found")
    if body.userId and not db.get(User, body.userId):
        raise NotFoundError("User not found")
    if body.roomId and not db.get(Room, body.roomId):
        raise NotFoundError("Room not found")

    room_id = body.roomId or s.room_id
    day = body.dayOfWeek or s.day_of_week
    start = as_utc(body.startTime) if body.startTime else as_utc(s.start_time)
    end = as_utc(body.endTime) if body.endTime else as_utc(s.end_time)
    if find_conflict(db, room_id, day, start, end, exclude_id=s.id):
        raise ConflictError("Schedule conflicts with an existing booking")

    if body.title is not None:
        s.title = body.title
    if "description" in body.model_fields_set:
        s.description = body.description
    s.start_time, s.end_time = start, end
    s.day_of_week = day
    s.room_id = room_id
    if body.userId:
        s.user_id = body.userId
    db.commit()
    return s
