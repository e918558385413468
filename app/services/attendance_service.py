from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, time, timezone

from loguru import logger
from sqlalchemy.orm import Session

from app.core.errors import BusinessRuleError, NotFoundError
from app.models.attendance import Attendance
from app.models.building import Room
from app.models.schedule import Schedule
from app.models.ticket import Ticket
from app.models.user import User
from app.schemas.attendance import AttendanceIn
from app.services.pagination import paginate

# (attribute, label) in the order labels appear in ticket titles
EQUIPMENT = (
    ("system_unit", "System Unit"),
    ("keyboard", "Keyboard"),
    ("mouse", "Mouse"),
    ("internet", "Internet"),
    ("ups", "UPS"),
)

DEFAULT_ROLE = "member"


@dataclass
class EscalationOutcome:
    """What happened to the optional ticket after attendance was committed."""
    status: str  # not_needed | not_requested | anonymous | created | failed
    ticket_id: str | None = None
    error: str | None = None


@dataclass
class SubmissionResult:
    attendance: Attendance
    escalation: EscalationOutcome


def missing_equipment(record: Attendance) -> list[str]:
    return [label for attr, label in EQUIPMENT if not getattr(record, attr)]


def escalation_title(missing: list[str], first_name: str, last_name: str) -> str:
    return f"Equipment Issue: {', '.join(missing)} - {first_name} {last_name}"


def escalation_description(record: Attendance, room: Room, missing: list[str]) -> str:
    d = record.date
    return (
        f"Student: {record.first_name} {record.last_name}\n"
        f"Email: {record.email}\n"
        f"Section: {record.section}\n"
        f"Year Level: {record.year_level}\n"
        f"Subject: {record.subject}\n"
        f"Date: {d.month}/{d.day}/{d.year}\n"
        f"Room: {room.number}\n"
        "\n"
        "Missing/Non-functional Equipment:\n"
        f"{', '.join(missing)}\n"
        "\n"
        "Additional Notes:\n"
        f"{record.description or 'No additional notes provided.'}\n"
    )


def get_or_create_user(db: Session, external_id: str) -> User:
    u = db.query(User).filter(User.external_id == external_id).first()
    if u:
        return u
    u = User(id=str(uuid.uuid4()), external_id=external_id, role=DEFAULT_ROLE)
    db.add(u)
    db.flush()
    return u


def record_attendance(db: Session, body: AttendanceIn, now: datetime | None = None) -> tuple[Attendance, Room]:
    """Step 1: insert the attendance row. Nothing is written when the schedule is unknown."""
    schedule = db.get(Schedule, body.scheduleId)
    room = db.get(Room, schedule.room_id) if schedule else None
    if not schedule or not room:
        logger.info(f"Schedule not found: {body.scheduleId}")
        raise NotFoundError("Schedule not found")

    now = now or datetime.now(timezone.utc)
    record = Attendance(
        id=str(uuid.uuid4()),
        schedule_id=schedule.id,
        first_name=body.firstName,
        last_name=body.lastName,
        email=str(body.email),
        section=body.section,
        year_level=body.yearLevel,
        subject=body.subject,
        date=now,
        description=body.description,
        system_unit=body.systemUnit,
        keyboard=body.keyboard,
        mouse=body.mouse,
        internet=body.internet,
        ups=body.ups,
        created_at=now,
        updated_at=now,
    )
    db.add(record)
    db.commit()
    logger.info(f"Attendance record created: {record.id}")
    return record, room


def escalate(db: Session, record: Attendance, room: Room, requested: bool, caller_id: str | None) -> EscalationOutcome:
    """Step 2: open an ISSUE_REPORT ticket for missing equipment when asked to.

    Runs after the attendance commit, so a failure here is rolled back on its own
    and reported in the outcome instead of raised.
    """
    missing = missing_equipment(record)
    if not missing:
        return EscalationOutcome("not_needed")
    if not requested:
        return EscalationOutcome("not_requested")
    if not caller_id:
        logger.info("Not creating ticket because user is not logged in")
        return EscalationOutcome("anonymous")

    try:
        creator = get_or_create_user(db, caller_id)
        ticket = Ticket(
            id=str(uuid.uuid4()),
            title=escalation_title(missing, record.first_name, record.last_name),
            description=escalation_description(record, room, missing),
            status="OPEN",
            priority="MEDIUM",
            ticket_type="ISSUE_REPORT",
            room_id=room.id,
            created_by_id=creator.id,
        )
        db.add(ticket)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.warning(f"Error creating ticket for attendance {record.id}: {e}")
        return EscalationOutcome("failed", error=str(e))

    logger.info(f"Ticket created: {ticket.id}")
    return EscalationOutcome("created", ticket_id=ticket.id)


def submit_attendance(db: Session, body: AttendanceIn, caller_id: str | None, now: datetime | None = None) -> SubmissionResult:
    record, room = record_attendance(db, body, now=now)
    outcome = escalate(db, record, room, bool(body.createTicket), caller_id)
    return SubmissionResult(attendance=record, escalation=outcome)


def parse_bound(value: str | None, end_of_day: bool = False) -> datetime | None:
    """ISO date or datetime -> aware UTC datetime. A bare end date covers that whole day."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise BusinessRuleError(f"Invalid date: {value}")
    if end_of_day and len(value) == 10:
        dt = datetime.combine(dt.date(), time.max)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def list_attendance(db: Session, page: int = 1, limit: int = 10, start_date: str | None = None,
                    end_date: str | None = None, schedule_id: str | None = None):
    start = parse_bound(start_date)
    end = parse_bound(end_date, end_of_day=True)

    query = (
        db.query(Attendance, Schedule, Room, User)
        .join(Schedule, Schedule.id == Attendance.schedule_id)
        .join(Room, Room.id == Schedule.room_id)
        .outerjoin(User, User.id == Schedule.user_id)
    )
    if schedule_id:
        query = query.filter(Attendance.schedule_id == schedule_id)
    if start:
        query = query.filter(Attendance.date >= start)
    if end:
        query = query.filter(Attendance.date <= end)

    return paginate(query.order_by(Attendance.date.desc()), page, limit)
