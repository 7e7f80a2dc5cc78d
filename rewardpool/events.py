"""
Pool Event Log

Every mutating pool operation emits a structured event recording the
operation, the actor and the resulting amounts. Events are the audit trail
from which the accrual history can be reconstructed:
- Stakes, withdrawals and reward payouts
- Reward deposits and round changes
- Worker registration, liveness reports and forfeits
- Settlement sweeps
- Directory deployments and role changes

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from loguru import logger


# =============================================================================
# Event Types
# =============================================================================


class EventType(Enum):
    """Types of pool events."""

    # Stake events
    STAKED = "staked"
    WITHDRAWN = "withdrawn"

    # Reward events
    REWARD_ADDED = "reward_added"
    REWARD_PAID = "reward_paid"
    REWARD_FORFEITED = "reward_forfeited"
    SETTLED = "settled"

    # Worker events
    WORKER_REGISTERED = "worker_registered"
    WORKER_EXITED = "worker_exited"
    LIVENESS_REPORTED = "liveness_reported"

    # Directory events
    POOL_DEPLOYED = "pool_deployed"
    OWNERSHIP_TRANSFERRED = "ownership_transferred"
    REWARDER_ADDED = "rewarder_added"
    REWARDER_REMOVED = "rewarder_removed"


@dataclass
class PoolEvent:
    """Audit event emitted by a pool or directory."""

    event_type: EventType
    pool: str
    actor: str
    timestamp: int
    data: dict[str, Any] = field(default_factory=dict)
    sequence: int = 0

    def __str__(self) -> str:
        return (
            f"#{self.sequence} {self.event_type.value} on {self.pool} "
            f"by {self.actor} at {self.timestamp}: {self.data}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "event_type": self.event_type.value,
            "pool": self.pool,
            "actor": self.actor,
            "timestamp": self.timestamp,
            "data": dict(self.data),
        }


# =============================================================================
# Event Handler Protocol
# =============================================================================


EventHandler = Callable[[PoolEvent], None]


# =============================================================================
# Event Log
# =============================================================================


class EventLog:
    """
    Ordered event history with per-type handler callbacks.

    Handlers run synchronously after the emitting operation has committed.
    A failing handler is logged and does not affect the operation or the
    other handlers.
    """

    def __init__(self, max_history_size: int | None = 10_000):
        """
        Initialize event log.

        Args:
            max_history_size: Events kept in memory (None keeps everything)
        """
        self.handlers: dict[EventType, list[EventHandler]] = {
            event_type: [] for event_type in EventType
        }
        self.history: deque[PoolEvent] = deque(maxlen=max_history_size)
        self._sequence = 0

    def register_handler(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Register event handler callback.

        Args:
            event_type: Type of event to handle
            handler: Callback receiving the event
        """
        self.handlers[event_type].append(handler)
        logger.debug(
            "Registered event handler",
            event_type=event_type.value,
            total_handlers=len(self.handlers[event_type]),
        )

    def unregister_handler(self, event_type: EventType, handler: EventHandler) -> None:
        """Unregister event handler callback."""
        if handler in self.handlers[event_type]:
            self.handlers[event_type].remove(handler)
            logger.debug("Unregistered event handler", event_type=event_type.value)

    def publish(self, event: PoolEvent) -> PoolEvent:
        """
        Append event to history and dispatch it to registered handlers.

        Args:
            event: Event to publish

        Returns:
            The event, with its sequence number assigned
        """
        self._sequence += 1
        event.sequence = self._sequence
        self.history.append(event)

        logger.info(
            f"Pool event: {event.event_type.value}",
            pool=event.pool,
            actor=event.actor,
            **event.data,
        )

        for handler in self.handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    "Handler error",
                    event_type=event.event_type.value,
                    error=str(e),
                )
        return event

    def get_event_history(
        self,
        event_type: EventType | None = None,
        pool: str | None = None,
        limit: int = 100,
    ) -> list[PoolEvent]:
        """
        Get recent event history.

        Args:
            event_type: Filter by event type (None for all)
            pool: Filter by pool address (None for all)
            limit: Maximum number of events to return

        Returns:
            List of recent events, oldest first
        """
        events = list(self.history)

        if event_type:
            events = [e for e in events if e.event_type == event_type]
        if pool:
            events = [e for e in events if e.pool == pool]

        return events[-limit:]

    def last(self, event_type: EventType | None = None) -> PoolEvent | None:
        events = self.get_event_history(event_type, limit=1)
        return events[0] if events else None


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "EventType",
    "PoolEvent",
    "EventHandler",
    "EventLog",
]
