"""
Round scheduling.

A deposit of ``amount`` over ``duration`` seconds starts a new round. Any
unspent emission of a round still in flight is blended into the new rate, so
no reward mass is lost or double counted whether the new round starts before
or after the old one's scheduled end.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from ..errors import PreconditionViolation
from .accumulator import RewardLedger


@dataclass(frozen=True)
class RoundUpdate:
    """Result of scheduling a reward round."""

    amount: int
    duration: int  # seconds
    leftover: int  # unspent reward carried over from the previous round
    reward_rate: int  # scaled by ledger precision
    round_start: int  # unchanged by a top-up of a round in flight
    round_end: int


@dataclass(frozen=True)
class Distribution:
    """Result of an instantaneous distribution."""

    amount: int
    accumulator_delta: int
    undistributed: int


def schedule_round(
    ledger: RewardLedger,
    amount: int,
    duration: int,
    notified: bool = True,
) -> RoundUpdate | None:
    """
    Start (or extend) a reward round.

    Args:
        ledger: Ledger to update
        amount: Reward deposited (base units)
        duration: Round length in seconds
        notified: Whether ``amount`` still has to be added to ``total_reward_notified``

    Returns:
        RoundUpdate, or None when ``amount`` is zero (no-op)
    """
    if amount == 0:
        return None
    if amount < 0:
        raise PreconditionViolation(f"reward amount must be non-negative, got {amount}")
    if duration <= 0:
        raise PreconditionViolation(f"duration must be positive, got {duration}")

    ledger.flush()
    now = ledger.now()

    leftover_scaled = 0
    if now < ledger.round_end:
        leftover_scaled = ledger.reward_rate * (ledger.round_end - now)
    else:
        # emission is continuous across top-ups; only a fresh round moves the start
        ledger.round_start = now

    ledger.reward_rate = (amount * ledger.precision + leftover_scaled) // duration
    ledger.round_end = now + duration
    ledger.last_update_time = now
    if notified:
        ledger.total_reward_notified += amount

    update = RoundUpdate(
        amount=amount,
        duration=duration,
        leftover=leftover_scaled // ledger.precision,
        reward_rate=ledger.reward_rate,
        round_start=ledger.round_start,
        round_end=ledger.round_end,
    )
    logger.debug(
        "Scheduled reward round",
        amount=amount,
        duration=duration,
        leftover=update.leftover,
        round_end=update.round_end,
    )
    return update


def distribute_now(ledger: RewardLedger, amount: int) -> Distribution | None:
    """
    Split ``amount`` immediately among the current weight holders.

    With no weight in the pool the whole amount becomes undistributed.
    """
    if amount == 0:
        return None
    if amount < 0:
        raise PreconditionViolation(f"reward amount must be non-negative, got {amount}")

    ledger.flush()
    ledger.total_reward_notified += amount

    if ledger.total_weight == 0:
        ledger.add_undistributed(amount)
        return Distribution(amount=amount, accumulator_delta=0, undistributed=amount)

    delta = amount * ledger.precision // ledger.total_weight
    ledger.accumulator += delta
    return Distribution(amount=amount, accumulator_delta=delta, undistributed=0)


__all__ = ["RoundUpdate", "Distribution", "schedule_round", "distribute_now"]
