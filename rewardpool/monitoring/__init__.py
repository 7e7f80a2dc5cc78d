"""
Observability for reward pools.

Structured logging with loguru; pool activity itself is audited through
:mod:`rewardpool.events`.

Author: BelizeChain Team
License: MIT
"""

from .logging_config import (
    configure_logging,
    configure_from_config,
    get_logger,
    LogContext,
    log_rejected,
)

__all__ = [
    "configure_logging",
    "configure_from_config",
    "get_logger",
    "LogContext",
    "log_rejected",
]
