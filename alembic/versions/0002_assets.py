"""assets

Revision ID: 0002_assets
Revises: 0001_initial
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0002_assets"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "assets",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("asset_tag", sa.String(length=80), nullable=True),
        sa.Column("asset_type", sa.String(length=30), nullable=False),
        sa.Column("system_unit", sa.String(length=120), nullable=True),
        sa.Column("ups", sa.String(length=120), nullable=True),
        sa.Column("monitor", sa.String(length=120), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="WORKING"),
        sa.Column("remarks", sa.String(length=500), nullable=True),
        sa.Column("room_id", sa.String(length=36), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_assets_asset_type", "assets", ["asset_type"])
    op.create_index("ix_assets_status", "assets", ["status"])
    op.create_index("ix_assets_room_id", "assets", ["room_id"])


def downgrade() -> None:
    op.drop_table("assets")
