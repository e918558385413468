import sys

from loguru import logger

from app.core.config import settings

# loguru spells "warn" as WARNING
LOGURU_LEVELS = {"debug": "DEBUG", "info": "INFO", "warn": "WARNING", "error": "ERROR"}


def setup_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with one stderr sink at the configured level."""
    logger.remove()
    logger.configure(extra={"service": settings.APP_NAME})
    logger.add(
        sys.stderr,
        level=LOGURU_LEVELS.get(level or settings.LOG_LEVEL, "INFO"),
        format="{time:YYYY-MM-DD HH:mm:ss} [{level}] [{extra[service]}] {message}",
    )
