"""
Logging Configuration for reward pools.

Provides structured logging with loguru integration.

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger

if TYPE_CHECKING:
    from ..config import LoggingConfig


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    rotation: str = "100 MB",
    retention: str = "30 days",
    format_string: Optional[str] = None,
    serialize: bool = False,
) -> None:
    """
    Configure logging for reward pools.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        rotation: Log rotation size/time
        retention: Log retention period
        format_string: Custom format string
        serialize: Whether to serialize logs as JSON
    """
    # Remove default handler
    logger.remove()

    if format_string is None:
        if serialize:
            format_string = "{message}"
        else:
            format_string = (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[component]}</cyan> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
                "<level>{message}</level>"
            )

    # Context has to exist before the first record is formatted
    logger.configure(extra={"component": "rewardpool"})

    logger.add(
        sys.stderr,
        format=format_string,
        level=log_level.upper(),
        colorize=not serialize,
        serialize=serialize,
    )

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_file),
            format=format_string,
            level=log_level.upper(),
            rotation=rotation,
            retention=retention,
            compression="zip",
            serialize=serialize,
        )


def configure_from_config(config: LoggingConfig) -> None:
    """Apply a :class:`~rewardpool.config.LoggingConfig`."""
    configure_logging(
        log_level=config.level,
        log_file=config.log_file,
        rotation=config.rotation,
        retention=config.retention,
        serialize=config.serialize,
    )


def get_logger(name: str):
    """
    Get logger instance for component.

    Args:
        name: Component name

    Returns:
        Logger bound to the component
    """
    return logger.bind(component=name)


class LogContext:
    """Context manager for structured logging."""

    def __init__(self, **kwargs):
        """
        Initialize log context.

        Args:
            **kwargs: Context key-value pairs
        """
        self.context = kwargs
        self.token = None

    def __enter__(self):
        self.token = logger.contextualize(**self.context)
        self.token.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token:
            self.token.__exit__(exc_type, exc_val, exc_tb)


def log_rejected(operation: str, actor: str, exception: Exception) -> None:
    """Log an operation that failed and was rolled back."""
    logger.warning(
        f"Rejected {operation}: {type(exception).__name__}: {exception}",
        actor=actor,
    )
