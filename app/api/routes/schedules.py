from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.building import Building, Floor, Room
from app.models.schedule import Schedule
from app.models.user import User
from app.schemas.schedule import ScheduleIn, SchedulePatch
from app.services.schedule_service import create_schedule, update_schedule

router = APIRouter(tags=["schedules"])


def schedule_dict(s: Schedule, u: User | None = None, r: Room | None = None,
                  f: Floor | None = None, b: Building | None = None) -> dict:
    d = {
        "id": s.id,
        "title": s.title,
        "description": s.description,
        "startTime": s.start_time.isoformat(),
        "endTime": s.end_time.isoformat(),
        "dayOfWeek": s.day_of_week,
        "userId": s.user_id,
        "roomId": s.room_id,
    }
    if u is not None:
        d["user"] = {"id": u.id, "firstName": u.first_name, "lastName": u.last_name,
                     "username": u.username, "email": u.email, "role": u.role}
    if r is not None:
        d["room"] = {
            "id": r.id, "number": r.number, "name": r.name, "type": r.type,
            "floor": {"id": f.id, "number": f.number,
                      "building": {"id": b.id, "name": b.name} if b else None} if f else None,
        }
    return d


def _schedule_rows(db: Session):
    return (
        db.query(Schedule, User, Room, Floor, Building)
        .outerjoin(User, User.id == Schedule.user_id)
        .outerjoin(Room, Room.id == Schedule.room_id)
        .outerjoin(Floor, Floor.id == Room.floor_id)
        .outerjoin(Building, Building.id == Floor.building_id)
    )


@router.get("/schedules")
def list_schedules(db: Session = Depends(get_db)):
    rows = _schedule_rows(db).order_by(Schedule.day_of_week.asc(), Schedule.start_time.asc()).all()
    return {"success": True, "data": [schedule_dict(*row) for row in rows]}


@router.post("/schedules", status_code=201)
def create(body: ScheduleIn, db: Session = Depends(get_db)):
    s = create_schedule(db, body)
    return schedule_dict(s)


@router.get("/schedules/{schedule_id}")
def get_schedule(schedule_id: str, db: Session = Depends(get_db)):
    row = _schedule_rows(db).filter(Schedule.id == schedule_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return schedule_dict(*row)


@router.patch("/schedules/{schedule_id}")
def patch_schedule(schedule_id: str, body: SchedulePatch, db: Session = Depends(get_db)):
    s = update_schedule(db, schedule_id, body)
    return schedule_dict(s)


@router.delete("/schedules/{schedule_id}")
def delete_schedule(schedule_id: str, db: Session = Depends(get_db)):
    s = db.get(Schedule, schedule_id)
    if not s:
        raise HTTPException(status_code=404, detail="Schedule not found")
    db.delete(s)
    db.commit()
    return {"success": True}
