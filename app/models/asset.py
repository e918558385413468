from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

ASSET_TYPES = ("COMPUTER", "PRINTER", "PROJECTOR", "NETWORK_EQUIPMENT", "OTHER")
ASSET_STATUSES = ("WORKING", "NEEDS_REPAIR", "OUT_OF_SERVICE", "UNDER_MAINTENANCE")


class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    asset_tag: Mapped[str | None] = mapped_column(String(80), nullable=True)
    asset_type: Mapped[str] = mapped_column(String(30), index=True)
    # serial numbers of the parts making up a workstation
    system_unit: Mapped[str | None] = mapped_column(String(120), nullable=True)
    ups: Mapped[str | None] = mapped_column(String(120), nullable=True)
    monitor: Mapped[str | None] = mapped_column(String(120), nullable=True)
    status: Mapped[str] = mapped_column(String(30), default="WORKING", index=True)
    remarks: Mapped[str | None] = mapped_column(String(500), nullable=True)
    room_id: Mapped[str] = mapped_column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
