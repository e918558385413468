import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.asset import Asset
from app.models.building import Building, Floor, Room
from app.schemas.inventory import AssetIn

router = APIRouter(tags=["assets"])


def asset_dict(a: Asset) -> dict:
    return {
        "id": a.id,
        "assetTag": a.asset_tag,
        "assetType": a.asset_type,
        "systemUnit": a.system_unit,
        "ups": a.ups,
        "monitor": a.monitor,
        "status": a.status,
        "remarks": a.remarks,
        "roomId": a.room_id,
        "createdAt": a.created_at.isoformat() if a.created_at else None,
        "updatedAt": a.updated_at.isoformat() if a.updated_at else None,
    }


@router.get("/assets")
def list_assets(roomId: str | None = None, status: str | None = None, assetType: str | None = None,
                db: Session = Depends(get_db)):
    q = (
        db.query(Asset, Room, Floor, Building)
        .join(Room, Room.id == Asset.room_id)
        .join(Floor, Floor.id == Room.floor_id)
        .join(Building, Building.id == Floor.building_id)
    )
    if roomId:
        q = q.filter(Asset.room_id == roomId)
    if status:
        q = q.filter(Asset.status == status)
    if assetType:
        q = q.filter(Asset.asset_type == assetType)
    data = []
    for a, r, f, b in q.order_by(Asset.created_at.asc()).all():
        d = asset_dict(a)
        d["room"] = {
            "id": r.id, "number": r.number, "name": r.name, "type": r.type,
            "floor": {"id": f.id, "number": f.number, "building": {"id": b.id, "name": b.name}},
        }
        data.append(d)
    return data


@router.post("/assets", status_code=201)
def create_asset(body: AssetIn, db: Session = Depends(get_db)):
    if not body.roomId or not body.assetType:
        raise HTTPException(status_code=400, detail="Room ID and asset type are required")
    if not db.get(Room, body.roomId):
        raise HTTPException(status_code=404, detail="Room not found")
    a = Asset(
        id=str(uuid.uuid4()),
        asset_tag=body.assetTag or None,
        asset_type=body.assetType,
        system_unit=body.systemUnit or None,
        ups=body.ups or None,
        monitor=body.monitor or None,
        status=body.status or "WORKING",
        remarks=body.remarks or None,
        room_id=body.roomId,
    )
    db.add(a)
    db.commit()
    return asset_dict(a)
