from __future__ import annotations

import csv
import io
import uuid
from datetime import datetime, timezone

from loguru import logger
from sqlalchemy.orm import Session

from app.core.errors import BusinessRuleError, NotFoundError
from app.models.building import Room
from app.models.storage import DeploymentRecord, StorageItem

# sub-types of COMPUTER_PART that are tracked one unit per serial number
SERIALIZED_SUB_TYPES = ("SYSTEM_UNIT", "MONITOR", "UPS")

COMPUTER_PART = "COMPUTER_PART"

DEFAULT_DEPLOYER = "System User"

STORAGE_CSV_HEADERS = ("Name", "ItemType", "Quantity", "Unit", "Remarks")
STORAGE_TEMPLATE_ROWS = (
    ("Example Item", "Equipment", 10, "pcs", "New items"),
    ("Medical Supply", "Consumable", 50, "boxes", "For emergency use"),
    ("Office Supply", "Stationery", 100, "pcs", "General use"),
)


def serial_required(item: StorageItem) -> bool:
    return item.item_type == COMPUTER_PART and item.sub_type in SERIALIZED_SUB_TYPES


def deploy_item(db: Session, *, storage_item_id: str, quantity: int, room_id: str,
                serial_number: str | None = None, remarks: str | None = None,
                deployed_by: str | None = None) -> DeploymentRecord:
    """Move `quantity` units of a storage item into a room.

    All checks and writes share one transaction; any rule failure rolls it back
    and raises BusinessRuleError so stock is never partially decremented.
    """
    try:
        item = (
            db.query(StorageItem)
            .filter(StorageItem.id == storage_item_id)
            .with_for_update()
            .first()
        )
        if not item:
            raise BusinessRuleError("Storage item not found")
        if item.quantity < quantity:
            raise BusinessRuleError("Not enough quantity available")
        if not db.get(Room, room_id):
            raise BusinessRuleError("Room not found")

        if serial_required(item) and not serial_number:
            raise BusinessRuleError(f"Serial number is required for {item.sub_type}")

        if serial_number:
            serials = list(item.serial_numbers or [])
            if serial_number not in serials:
                raise BusinessRuleError("Invalid serial number")
            if quantity > 1:
                raise BusinessRuleError("Can only deploy one item when specifying a serial number")
            # reassign so the JSON column is flagged dirty
            item.serial_numbers = [s for s in serials if s != serial_number]

        item.quantity = item.quantity - quantity
        now = datetime.now(timezone.utc)
        record = DeploymentRecord(
            id=str(uuid.uuid4()),
            storage_item_id=item.id,
            quantity=quantity,
            serial_number=serial_number or None,
            to_room_id=room_id,
            date=now,
            deployed_by=deployed_by or DEFAULT_DEPLOYER,
            remarks=remarks or None,
            created_at=now,
        )
        db.add(record)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Deployed {quantity} x {item.name} to room {room_id} ({record.id})")
    return record


def delete_item(db: Session, item_id: str) -> None:
    item = db.get(StorageItem, item_id)
    if not item:
        raise NotFoundError("Storage item not found")
    used = db.query(DeploymentRecord).filter(DeploymentRecord.storage_item_id == item_id).count()
    if used:
        raise BusinessRuleError(
            "Cannot delete storage item with deployment history. Consider setting quantity to 0 instead."
        )
    db.delete(item)
    db.commit()


def check_serial_coverage(sub_type: str | None, quantity: int, serials: list[str]) -> None:
    if sub_type in SERIALIZED_SUB_TYPES and quantity > 0 and len(serials) < quantity:
        raise BusinessRuleError(
            f"{sub_type} requires a serial number for each unit ({len(serials)}/{quantity})"
        )


def save_computer_part(db: Session, item: StorageItem | None, *, name: str, sub_type: str,
                       quantity: int, unit: str | None = None, remarks: str | None = None,
                       serials: list[str] | None = None) -> StorageItem:
    """Create a COMPUTER_PART item, or overwrite ``item`` with the given fields."""
    serials = list(serials or [])
    check_serial_coverage(sub_type, quantity, serials)
    if item is None:
        item = StorageItem(id=str(uuid.uuid4()), item_type=COMPUTER_PART)
        db.add(item)
    item.name = name
    item.sub_type = sub_type
    item.quantity = quantity
    item.unit = unit or None
    item.remarks = remarks or None
    item.serial_numbers = serials
    db.commit()
    return item


def _csv_text(rows) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(STORAGE_CSV_HEADERS)
    writer.writerows(rows)
    return buf.getvalue()


def storage_template_csv() -> str:
    return _csv_text(STORAGE_TEMPLATE_ROWS)


def storage_export_csv(items: list[StorageItem]) -> str:
    return _csv_text((i.name, i.item_type, i.quantity, i.unit or "", i.remarks or "") for i in items)


def parse_storage_csv(text: str) -> tuple[list[dict], int]:
    """Rows of a storage CSV as item fields, plus the number of data rows read.

    Rows missing a name, item type or quantity are skipped. A quantity that is not
    a whole number counts as 0.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise BusinessRuleError("Invalid CSV format")
    reader = csv.reader(lines)
    headers = [h.strip() for h in next(reader)]
    items = []
    total = 0
    for values in reader:
        total += 1
        row = dict(zip(headers, (v.strip() for v in values)))
        if not row.get("Name") or not row.get("ItemType") or not row.get("Quantity"):
            continue
        try:
            quantity = max(int(row["Quantity"]), 0)
        except ValueError:
            quantity = 0
        items.append({
            "name": row["Name"],
            "item_type": row["ItemType"],
            "quantity": quantity,
            "unit": row.get("Unit") or None,
            "remarks": row.get("Remarks") or None,
        })
    return items, total


def import_storage_csv(db: Session, text: str) -> tuple[int, int]:
    items, total = parse_storage_csv(text)
    if not items:
        raise BusinessRuleError("No valid items found in CSV")
    for fields in items:
        db.add(StorageItem(id=str(uuid.uuid4()), serial_numbers=[], **fields))
    db.commit()
    logger.info(f"Imported {len(items)} of {total} storage rows from CSV")
    return len(items), total
