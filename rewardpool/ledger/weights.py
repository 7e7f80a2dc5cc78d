"""
Weight policies for the reward ledger.

A policy decides how much of a participant's pending accrual is credited at a
liveness-enforcing checkpoint. Stake-weighted pools credit everything;
headcount pools forfeit the part of the window during which the worker had
gone stale.

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, TYPE_CHECKING

from ..errors import PreconditionViolation

if TYPE_CHECKING:
    from .accumulator import ParticipantRecord


@dataclass(frozen=True)
class Checkpoint:
    """Outcome of a single participant checkpoint."""

    credited: int = 0
    forfeited: int = 0

    @property
    def pending(self) -> int:
        return self.credited + self.forfeited


class WeightPolicy(Protocol):
    """Pluggable weight source used by :class:`RewardLedger`."""

    name: str

    def split(self, record: ParticipantRecord, pending: int, window_start: int, window_end: int) -> Checkpoint:
        """Split ``pending`` accrued over ``[window_start, window_end]`` into credited/forfeited."""
        ...


class StakeWeight:
    """Weight equals the staked balance; all accrual is credited."""

    name = "stake"

    def split(self, record: ParticipantRecord, pending: int, window_start: int, window_end: int) -> Checkpoint:
        return Checkpoint(credited=pending)


class HeadcountWeight:
    """
    Binary presence weight with a liveness deadline.

    A worker is fresh until ``last_activity_time + max_report_span``. Accrual
    over the checkpoint window ``[window_start, window_end]`` is
    prorated by time: the share falling after the deadline is forfeited.
    """

    name = "headcount"

    def __init__(self, max_report_span: int):
        if max_report_span <= 0:
            raise PreconditionViolation(f"max_report_span must be positive, got {max_report_span}")
        self.max_report_span = max_report_span

    def fresh_until(self, record: ParticipantRecord) -> int:
        return record.last_activity_time + self.max_report_span

    def in_window(self, record: ParticipantRecord, now: int) -> bool:
        return now - record.last_activity_time <= self.max_report_span

    def split(self, record: ParticipantRecord, pending: int, window_start: int, window_end: int) -> Checkpoint:
        if pending == 0:
            return Checkpoint()

        window = window_end - window_start
        if window <= 0:
            return Checkpoint(credited=pending)

        deadline = self.fresh_until(record)
        fresh = max(0, min(window_end, deadline) - window_start)
        if fresh >= window:
            return Checkpoint(credited=pending)

        credited = pending * fresh // window
        return Checkpoint(credited=credited, forfeited=pending - credited)


__all__ = [
    "Checkpoint",
    "WeightPolicy",
    "StakeWeight",
    "HeadcountWeight",
]
