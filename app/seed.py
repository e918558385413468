import uuid

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.core.config import settings
from app.models.user import User
from app.services.user_service import ensure_permission_rows


def ensure_admin(db: Session, external_id: str) -> None:
    """Link (or create) the bootstrap admin for an IdP subject."""
    u = db.query(User).filter(User.external_id == external_id).first()
    if u:
        if u.role != "admin":
            u.role = "admin"
            db.commit()
        return
    db.add(User(id=str(uuid.uuid4()), external_id=external_id, role="admin"))
    db.commit()
    logger.info(f"[seed] created admin user for {external_id}")


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM permissions LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("[seed] permissions table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        rows = ensure_permission_rows(db)
        db.commit()
        logger.info(f"[seed] {len(rows)} permissions present")

        if settings.SEED_ADMIN_EXTERNAL_ID:
            ensure_admin(db, settings.SEED_ADMIN_EXTERNAL_ID)
    finally:
        db.close()


if __name__ == "__main__":
    run()
