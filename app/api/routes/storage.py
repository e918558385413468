import uuid
from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import require_permission
from app.core.permissions import Capability
from app.models.storage import StorageItem
from app.models.user import User
from app.schemas.inventory import ComputerPartIn, StorageItemIn, StorageItemPatch
from app.services.storage_service import (
    delete_item, import_storage_csv, save_computer_part, storage_export_csv, storage_template_csv,
)

router = APIRouter(tags=["storage"])


def item_dict(i: StorageItem) -> dict:
    return {
        "id": i.id,
        "name": i.name,
        "itemType": i.item_type,
        "subType": i.sub_type,
        "quantity": i.quantity,
        "unit": i.unit,
        "remarks": i.remarks,
        "serialNumbers": list(i.serial_numbers or []),
        "createdAt": i.created_at.isoformat() if i.created_at else None,
        "updatedAt": i.updated_at.isoformat() if i.updated_at else None,
    }


@router.get("/storage")
def list_storage(itemType: str | None = None, db: Session = Depends(get_db)):
    q = db.query(StorageItem)
    if itemType:
        q = q.filter(StorageItem.item_type == itemType)
    return [item_dict(i) for i in q.order_by(StorageItem.name.asc()).all()]


@router.post("/storage", status_code=201)
def create_storage_item(body: StorageItemIn, db: Session = Depends(get_db)):
    if not body.name or not body.itemType:
        raise HTTPException(status_code=400, detail="Name and item type are required")
    i = StorageItem(
        id=str(uuid.uuid4()),
        name=body.name,
        item_type=body.itemType,
        sub_type=body.subType or None,
        quantity=body.quantity or 0,
        unit=body.unit or None,
        remarks=body.remarks or None,
        serial_numbers=list(body.serialNumbers),
    )
    db.add(i)
    db.commit()
    return item_dict(i)


@router.post("/storage/computer-part", status_code=201)
def create_computer_part(body: ComputerPartIn, db: Session = Depends(get_db)):
    if not body.name or not body.subType:
        raise HTTPException(status_code=400, detail="Name and subType are required")
    i = save_computer_part(
        db, None, name=body.name, sub_type=body.subType, quantity=body.quantity,
        unit=body.unit, remarks=body.remarks, serials=body.serialNumbers,
    )
    return item_dict(i)


@router.patch("/storage/computer-part/{item_id}")
def update_computer_part(item_id: str, body: ComputerPartIn, db: Session = Depends(get_db)):
    if not body.name or not body.subType:
        raise HTTPException(status_code=400, detail="Name and subType are required")
    i = db.get(StorageItem, item_id)
    if not i:
        raise HTTPException(status_code=404, detail="Storage item not found")
    i = save_computer_part(
        db, i, name=body.name, sub_type=body.subType, quantity=body.quantity,
        unit=body.unit, remarks=body.remarks, serials=body.serialNumbers,
    )
    return item_dict(i)


@router.get("/storage/export-csv")
def export_storage_csv(itemType: str | None = None, filename: str = "storage.csv", db: Session = Depends(get_db)):
    q = db.query(StorageItem)
    if itemType:
        q = q.filter(StorageItem.item_type == itemType)
    return csv_response(storage_export_csv(q.order_by(StorageItem.name.asc()).all()), filename)


@router.get("/storage/{item_id}")
def get_storage_item(item_id: str, db: Session = Depends(get_db)):
    i = db.get(StorageItem, item_id)
    if not i:
        raise HTTPException(status_code=404, detail="Storage item not found")
    return item_dict(i)


@router.patch("/storage/{item_id}")
def update_storage_item(item_id: str, body: StorageItemPatch, db: Session = Depends(get_db)):
    i = db.get(StorageItem, item_id)
    if not i:
        raise HTTPException(status_code=404, detail="Storage item not found")
    if body.quantity is not None and body.quantity < 0:
        raise HTTPException(status_code=400, detail="Quantity cannot be negative")
    fields = {
        "name": "name", "itemType": "item_type", "subType": "sub_type", "quantity": "quantity",
        "unit": "unit", "remarks": "remarks",
    }
    for field, attr in fields.items():
        value = getattr(body, field)
        if value is not None:
            setattr(i, attr, value)
    if body.serialNumbers is not None:
        i.serial_numbers = list(body.serialNumbers)
    db.commit()
    return item_dict(i)


@router.delete("/storage/{item_id}")
def delete_storage_item(item_id: str, db: Session = Depends(get_db)):
    delete_item(db, item_id)
    return {"success": True}


def csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-store",
        },
    )


@router.get("/download-csv")
def download_csv(filename: str = "download.csv", template: str = "storage"):
    if template.lower() == "storage":
        return csv_response(storage_template_csv(), filename)
    return csv_response("No template available for this type", filename)


@router.post("/import-csv")
def import_csv(type: str = "storage", content: bytes = Body(default=b"", media_type="text/csv"),
               db: Session = Depends(get_db),
               me: User = Depends(require_permission(Capability.STORAGE_CREATE))):
    if type.lower() != "storage":
        raise HTTPException(status_code=400, detail=f"Import type '{type}' not supported")
    if not content:
        raise HTTPException(status_code=400, detail="No file provided")
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Invalid CSV format")
    imported, total = import_storage_csv(db, text)
    return {"message": "Import successful", "imported": imported, "total": total}
