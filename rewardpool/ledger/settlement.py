"""
Settlement sweep of undistributed rewards.
"""

from __future__ import annotations

from ..errors import NotYetFinished
from .accumulator import RewardLedger


def ensure_finished(ledger: RewardLedger) -> None:
    """Raise :class:`NotYetFinished` unless a round was started and has ended."""
    if ledger.round_end == 0:
        raise NotYetFinished("pool has not started a reward round")
    now = ledger.now()
    if now <= ledger.round_end:
        raise NotYetFinished(
            f"round ends at {ledger.round_end}, {ledger.round_end - now}s remaining"
        )


def sweep_undistributed(ledger: RewardLedger) -> int:
    """
    Drain the undistributed balance after the round has ended.

    Returns:
        Whole reward units removed from the ledger (zero is valid)
    """
    ensure_finished(ledger)
    ledger.flush()
    return ledger.take_undistributed()


__all__ = ["ensure_finished", "sweep_undistributed"]
