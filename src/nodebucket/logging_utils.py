"""Configure loguru sinks for the server and the CLI."""

from __future__ import annotations

import sys

from loguru import logger


def configure_logging(level: str = "INFO") -> None:
    """Configure loguru logger with the specified level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan>\n"
            "{message}"
        ),
    )


def preview(text: str, limit: int = 40) -> str:
    """Shorten task text for log lines."""
    text = " ".join(str(text).split())
    return (text[:limit] + "…") if len(text) > limit else text
