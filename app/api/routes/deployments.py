from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_optional_user_id
from app.models.storage import DeploymentRecord
from app.models.user import User
from app.schemas.inventory import DeploymentIn
from app.services.storage_service import deploy_item

router = APIRouter(tags=["deployments"])


def deployment_dict(d: DeploymentRecord) -> dict:
    return {
        "id": d.id,
        "storageItemId": d.storage_item_id,
        "quantity": d.quantity,
        "serialNumber": d.serial_number,
        "toRoomId": d.to_room_id,
        "date": d.date.isoformat(),
        "deployedBy": d.deployed_by,
        "remarks": d.remarks,
    }


def _deployer_name(db: Session, user_id: str | None) -> str | None:
    if not user_id:
        return None
    u = db.query(User).filter(User.external_id == user_id).first()
    if not u:
        return None
    full = " ".join(p for p in (u.first_name, u.last_name) if p)
    return full or u.username or u.email


@router.post("/deployments")
def create_deployment(body: DeploymentIn, db: Session = Depends(get_db),
                      user_id: str | None = Depends(get_optional_user_id)):
    record = deploy_item(
        db,
        storage_item_id=body.storageItemId,
        quantity=body.quantity,
        room_id=body.roomId,
        serial_number=body.serialNumber,
        remarks=body.remarks,
        deployed_by=_deployer_name(db, user_id),
    )
    return {"deploymentRecord": deployment_dict(record)}


@router.get("/deployments")
def list_deployments(roomId: str | None = None, storageItemId: str | None = None, db: Session = Depends(get_db)):
    q = db.query(DeploymentRecord)
    if roomId:
        q = q.filter(DeploymentRecord.to_room_id == roomId)
    if storageItemId:
        q = q.filter(DeploymentRecord.storage_item_id == storageItemId)
    return [deployment_dict(d) for d in q.order_by(DeploymentRecord.date.desc()).all()]
