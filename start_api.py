#!/usr/bin/env python3
"""
Container entrypoint: wait for Postgres, upgrade the schema to head, seed the
permission catalogue, then hand the process over to uvicorn.
"""
import os
import sys

from loguru import logger

ROOT = os.path.dirname(os.path.abspath(__file__))


def migrate(database_url: str) -> None:
    from alembic import command
    from alembic.config import Config

    cfg = Config(os.path.join(ROOT, "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    logger.info("[start_api] alembic upgrade head")
    command.upgrade(cfg, "head")


def serve() -> None:
    port = os.getenv("PORT", "8000")
    logger.info(f"[start_api] starting uvicorn on :{port}")
    os.execv(
        sys.executable,
        [sys.executable, "-m", "uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", port],
    )


if __name__ == "__main__":
    import wait_for_db  # noqa: F401  (blocks until the database accepts connections)

    from app.core.config import settings
    from app.seed import run as run_seed

    migrate(settings.DATABASE_URL)
    run_seed()
    serve()
