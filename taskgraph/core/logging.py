"""Loguru configuration shared by the CLI and the API server."""

import sys
from pathlib import Path

from loguru import logger

from taskgraph.core.config import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure loguru based on settings.

    Replaces the default handler with a rotated file sink (unless
    ``taskgraph_log_dir`` is empty) and a colourised stderr sink.

    Args:
        settings: Optional settings override. Uses default if not provided.
    """
    settings = settings or get_settings()
    level = "DEBUG" if settings.taskgraph_debug else settings.taskgraph_log_level

    logger.remove()  # Remove default handler

    if settings.taskgraph_log_dir:
        logs_dir = Path(settings.taskgraph_log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(logs_dir / "taskgraph_{time:YYYY-MM-DD}.log"),
            rotation="1 day",
            retention="7 days",
            level=settings.taskgraph_log_level,
            format=LOG_FORMAT,
        )

    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        colorize=True,
    )

    logger.debug(f"Logging configured at level {level}")
