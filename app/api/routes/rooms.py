import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db, safe_query
from app.core.errors import BusinessRuleError
from app.models.building import Building, Floor, Room
from app.models.schedule import Schedule
from app.models.storage import DeploymentRecord, StorageItem
from app.models.user import User
from app.schemas.inventory import RoomIn, RoomPatch
from app.api.routes.buildings import room_dict

router = APIRouter(tags=["rooms"])


def _joined_rooms(db: Session, buildingId: str | None, floorId: str | None, type: str | None) -> list[dict]:
    q = (
        db.query(Room, Floor, Building)
        .join(Floor, Floor.id == Room.floor_id)
        .join(Building, Building.id == Floor.building_id)
    )
    if buildingId:
        q = q.filter(Floor.building_id == buildingId)
    if floorId:
        q = q.filter(Room.floor_id == floorId)
    if type:
        q = q.filter(Room.type == type)
    rows = q.order_by(Building.name.asc(), Floor.number.asc(), Room.number.asc()).all()
    return [{
        "id": r.id, "number": r.number, "name": r.name, "type": r.type,
        "floor": {"id": f.id, "number": f.number, "building": {"id": b.id, "name": b.name}},
    } for r, f, b in rows]


def _plain_rooms(db: Session, buildingId: str | None, floorId: str | None, type: str | None) -> list[dict]:
    q = db.query(Room)
    if buildingId:
        floor_ids = [fid for (fid,) in db.query(Floor.id).filter(Floor.building_id == buildingId).all()]
        q = q.filter(Room.floor_id.in_(floor_ids))
    if floorId:
        q = q.filter(Room.floor_id == floorId)
    if type:
        q = q.filter(Room.type == type)
    return [room_dict(r) for r in q.order_by(Room.number.asc()).all()]


@router.get("/rooms")
def list_rooms(buildingId: str | None = None, floorId: str | None = None, type: str | None = None,
               db: Session = Depends(get_db)):
    return safe_query(
        db,
        lambda: _joined_rooms(db, buildingId, floorId, type),
        fallback=lambda: _plain_rooms(db, buildingId, floorId, type),
    )


@router.post("/rooms", status_code=201)
def create_room(body: RoomIn, db: Session = Depends(get_db)):
    if not body.floorId or not body.number:
        raise HTTPException(status_code=400, detail="Floor ID and room number are required")
    if not db.get(Floor, body.floorId):
        raise HTTPException(status_code=404, detail="Floor not found")
    r = Room(id=str(uuid.uuid4()), number=body.number, name=body.name, type=body.type or "CLASSROOM", floor_id=body.floorId)
    db.add(r)
    db.commit()
    return room_dict(r)


def _get_room(db: Session, room_id: str) -> Room:
    r = db.get(Room, room_id)
    if not r:
        raise HTTPException(status_code=404, detail="Room not found")
    return r


@router.get("/rooms/{room_id}")
def get_room(room_id: str, db: Session = Depends(get_db)):
    r = _get_room(db, room_id)
    f = db.get(Floor, r.floor_id)
    b = db.get(Building, f.building_id) if f else None
    d = room_dict(r)
    if f:
        d["floor"] = {"id": f.id, "number": f.number, "building": {"id": b.id, "name": b.name} if b else None}
    return d


@router.patch("/rooms/{room_id}")
def update_room(room_id: str, body: RoomPatch, db: Session = Depends(get_db)):
    r = _get_room(db, room_id)
    if body.floorId and body.floorId != r.floor_id:
        if not db.get(Floor, body.floorId):
            raise HTTPException(status_code=404, detail="Floor not found")
        r.floor_id = body.floorId
    if body.number:
        r.number = body.number
    if "name" in body.model_fields_set:
        r.name = body.name
    if body.type:
        r.type = body.type
    db.commit()
    return room_dict(r)


@router.delete("/rooms/{room_id}")
def delete_room(room_id: str, db: Session = Depends(get_db)):
    r = _get_room(db, room_id)
    if db.query(DeploymentRecord).filter(DeploymentRecord.to_room_id == r.id).count():
        raise BusinessRuleError("Cannot delete room with deployed items. Please relocate all items first.")
    db.delete(r)
    db.commit()
    return {"success": True}


@router.get("/rooms/{room_id}/schedules")
def room_schedules(room_id: str, db: Session = Depends(get_db)):
    _get_room(db, room_id)
    rows = (
        db.query(Schedule, User)
        .outerjoin(User, User.id == Schedule.user_id)
        .filter(Schedule.room_id == room_id)
        .order_by(Schedule.start_time.asc())
        .all()
    )
    return [{
        "id": s.id,
        "title": s.title,
        "description": s.description,
        "startTime": s.start_time.isoformat(),
        "endTime": s.end_time.isoformat(),
        "dayOfWeek": s.day_of_week,
        "user": {"id": u.id, "firstName": u.first_name, "lastName": u.last_name} if u else None,
    } for s, u in rows]


@router.get("/rooms/{room_id}/deployments")
def room_deployments(room_id: str, db: Session = Depends(get_db)):
    _get_room(db, room_id)
    rows = (
        db.query(DeploymentRecord, StorageItem)
        .join(StorageItem, StorageItem.id == DeploymentRecord.storage_item_id)
        .filter(DeploymentRecord.to_room_id == room_id)
        .order_by(DeploymentRecord.date.desc())
        .all()
    )
    return [{
        "id": d.id,
        "quantity": d.quantity,
        "serialNumber": d.serial_number,
        "date": d.date.isoformat(),
        "deployedBy": d.deployed_by,
        "remarks": d.remarks,
        "storageItemId": si.id,
        "storageItemName": si.name,
        "itemType": si.item_type,
        "subType": si.sub_type,
        "unit": si.unit,
    } for d, si in rows]
