from pydantic import BaseModel, Field
from typing import List, Literal, Optional

class BuildingIn(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    address: Optional[str] = None

class FloorIn(BaseModel):
    number: Optional[int] = None
    name: Optional[str] = None
    buildingId: Optional[str] = None

class FloorPatch(BaseModel):
    number: Optional[int] = None
    name: Optional[str] = None

class RoomIn(BaseModel):
    number: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    floorId: Optional[str] = None

class RoomPatch(BaseModel):
    number: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    floorId: Optional[str] = None

class StorageItemIn(BaseModel):
    name: Optional[str] = None
    itemType: Optional[str] = None
    subType: Optional[str] = None
    quantity: int = Field(default=0, ge=0)
    unit: Optional[str] = None
    remarks: Optional[str] = None
    serialNumbers: List[str] = []

class StorageItemPatch(BaseModel):
    name: Optional[str] = None
    itemType: Optional[str] = None
    subType: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None
    remarks: Optional[str] = None
    serialNumbers: Optional[List[str]] = None

class DeploymentIn(BaseModel):
    storageItemId: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    roomId: str = Field(min_length=1)
    serialNumber: Optional[str] = None
    remarks: Optional[str] = None

class ComputerPartIn(BaseModel):
    name: Optional[str] = None
    subType: Optional[str] = None
    quantity: int = Field(default=0, ge=0)
    unit: Optional[str] = None
    remarks: Optional[str] = None
    serialNumbers: List[str] = []

class AssetIn(BaseModel):
    assetTag: Optional[str] = None
    assetType: Optional[Literal["COMPUTER", "PRINTER", "PROJECTOR", "NETWORK_EQUIPMENT", "OTHER"]] = None
    systemUnit: Optional[str] = None
    ups: Optional[str] = None
    monitor: Optional[str] = None
    status: Optional[Literal["WORKING", "NEEDS_REPAIR", "OUT_OF_SERVICE", "UNDER_MAINTENANCE"]] = None
    remarks: Optional[str] = None
    roomId: Optional[str] = None
