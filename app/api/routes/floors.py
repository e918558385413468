import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.building import Building, Floor, Room
from app.schemas.inventory import FloorIn, FloorPatch
from app.api.routes.buildings import building_dict, room_dict

router = APIRouter(tags=["floors"])


def floor_dict(f: Floor, b: Building | None = None) -> dict:
    d = {
        "id": f.id,
        "number": f.number,
        "name": f.name,
        "buildingId": f.building_id,
        "createdAt": f.created_at.isoformat() if f.created_at else None,
    }
    if b is not None:
        d["building"] = building_dict(b)
    return d


@router.get("/floors")
def list_floors(buildingId: str | None = None, db: Session = Depends(get_db)):
    q = db.query(Floor, Building).join(Building, Building.id == Floor.building_id)
    if buildingId:
        q = q.filter(Floor.building_id == buildingId)
    rows = q.order_by(Building.name.asc(), Floor.number.asc()).all()
    return [floor_dict(f, b) for f, b in rows]


@router.post("/floors", status_code=201)
def create_floor(body: FloorIn, db: Session = Depends(get_db)):
    if not body.buildingId or body.number is None:
        raise HTTPException(status_code=400, detail="Building ID and floor number are required")
    b = db.get(Building, body.buildingId)
    if not b:
        raise HTTPException(status_code=404, detail="Building not found")
    f = Floor(id=str(uuid.uuid4()), number=body.number, name=body.name or None, building_id=b.id)
    db.add(f)
    db.commit()
    return floor_dict(f, b)


@router.get("/floors/{floor_id}")
def get_floor(floor_id: str, db: Session = Depends(get_db)):
    f = db.get(Floor, floor_id)
    if not f:
        raise HTTPException(status_code=404, detail="Floor not found")
    rooms = db.query(Room).filter(Room.floor_id == f.id).order_by(Room.number.asc()).all()
    return {**floor_dict(f, db.get(Building, f.building_id)), "rooms": [room_dict(r) for r in rooms]}


@router.patch("/floors/{floor_id}")
def update_floor(floor_id: str, body: FloorPatch, db: Session = Depends(get_db)):
    f = db.get(Floor, floor_id)
    if not f:
        raise HTTPException(status_code=404, detail="Floor not found")
    if body.number is not None:
        f.number = body.number
    if "name" in body.model_fields_set:
        f.name = body.name or None
    db.commit()
    return floor_dict(f)


@router.delete("/floors/{floor_id}")
def delete_floor(floor_id: str, db: Session = Depends(get_db)):
    f = db.get(Floor, floor_id)
    if not f:
        raise HTTPException(status_code=404, detail="Floor not found")
    db.delete(f)
    db.commit()
    return {"success": True}
