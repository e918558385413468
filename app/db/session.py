from typing import Callable, TypeVar

from loguru import logger
from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.core.config import settings

T = TypeVar("T")


class Base(DeclarativeBase):
    pass


engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        db.rollback()
        return False


def safe_query(db: Session, query: Callable[[], T], fallback: Callable[[], T] | None = None) -> T:
    """Run `query`; on failure roll back and try `fallback` once (no retry loop)."""
    try:
        return query()
    except Exception as e:
        logger.warning(f"Query failed: {e}")
        db.rollback()
        if fallback is None:
            raise
        return fallback()
