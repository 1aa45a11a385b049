"""
Structured logging configuration using loguru.

Waiting-list operations log through `event_logger`, which binds the event id
so every line touching one queue can be grepped together.
"""
import sys
from loguru import logger
from app.core.config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<magenta>event={extra[event_id]}</magenta> - <level>{message}</level>"
)

# Remove default handler
logger.remove()
logger.configure(extra={"event_id": "-"})

logger.add(
    sys.stdout,
    format=LOG_FORMAT,
    level="DEBUG" if settings.ENVIRONMENT == "development" else "INFO",
    colorize=True,
)

# Add file handler for production
if settings.ENVIRONMENT == "production":
    logger.add(
        "logs/eventhub.log",
        rotation="500 MB",
        retention="10 days",
        compression="zip",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | event={extra[event_id]} - {message}",
        level="INFO",
    )


def event_logger(event_id):
    """Return the shared logger bound to one event."""
    return logger.bind(event_id=str(event_id))


__all__ = ["logger", "event_logger"]
