import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.building import Building, Floor, Room
from app.schemas.inventory import BuildingIn

router = APIRouter(tags=["buildings"])


def building_dict(b: Building) -> dict:
    return {
        "id": b.id,
        "name": b.name,
        "code": b.code,
        "address": b.address,
        "createdAt": b.created_at.isoformat() if b.created_at else None,
        "updatedAt": b.updated_at.isoformat() if b.updated_at else None,
    }


def room_dict(r: Room) -> dict:
    return {"id": r.id, "number": r.number, "name": r.name, "type": r.type, "floorId": r.floor_id}


def _with_floors(db: Session, buildings: list[Building]) -> list[dict]:
    ids = [b.id for b in buildings]
    floors = db.query(Floor).filter(Floor.building_id.in_(ids)).order_by(Floor.number.asc()).all() if ids else []
    floor_ids = [f.id for f in floors]
    rooms = db.query(Room).filter(Room.floor_id.in_(floor_ids)).order_by(Room.number.asc()).all() if floor_ids else []

    rooms_by_floor: dict[str, list] = {}
    for r in rooms:
        rooms_by_floor.setdefault(r.floor_id, []).append(room_dict(r))
    floors_by_building: dict[str, list] = {}
    for f in floors:
        floors_by_building.setdefault(f.building_id, []).append({
            "id": f.id, "number": f.number, "name": f.name, "buildingId": f.building_id,
            "rooms": rooms_by_floor.get(f.id, []),
        })
    return [{**building_dict(b), "floors": floors_by_building.get(b.id, [])} for b in buildings]


@router.get("/buildings")
def list_buildings(db: Session = Depends(get_db)):
    buildings = db.query(Building).order_by(Building.name.asc()).all()
    return _with_floors(db, buildings)


@router.post("/buildings", status_code=201)
def create_building(body: BuildingIn, db: Session = Depends(get_db)):
    if not body.name:
        raise HTTPException(status_code=400, detail="Building name is required")
    b = Building(id=str(uuid.uuid4()), name=body.name, code=body.code, address=body.address)
    db.add(b)
    db.commit()
    return building_dict(b)


@router.get("/buildings/{building_id}")
def get_building(building_id: str, db: Session = Depends(get_db)):
    b = db.get(Building, building_id)
    if not b:
        raise HTTPException(status_code=404, detail="Building not found")
    return _with_floors(db, [b])[0]


@router.patch("/buildings/{building_id}")
def update_building(building_id: str, body: BuildingIn, db: Session = Depends(get_db)):
    b = db.get(Building, building_id)
    if not b:
        raise HTTPException(status_code=404, detail="Building not found")
    for field, attr in (("name", "name"), ("code", "code"), ("address", "address")):
        if field in body.model_fields_set:
            setattr(b, attr, getattr(body, field))
    if not b.name:
        raise HTTPException(status_code=400, detail="Building name is required")
    db.commit()
    return building_dict(b)


@router.delete("/buildings/{building_id}")
def delete_building(building_id: str, db: Session = Depends(get_db)):
    b = db.get(Building, building_id)
    if not b:
        raise HTTPException(status_code=404, detail="Building not found")
    db.delete(b)
    db.commit()
    return {"success": True}
