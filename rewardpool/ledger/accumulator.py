"""
Reward Ledger

The per-pool accrual aggregate: a monotonic reward-per-weight accumulator,
lazily flushed up to ``min(now, round_end)``, plus one checkpoint record per
participant. Every operation is O(1) in the number of participants.

Ordering rule: ``flush()`` must run before any read or write of
``total_weight``, any rate change, and any checkpoint. ``update()`` performs
the flush + checkpoint pre-step that every pool mutator starts with.

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from loguru import logger

from ..errors import InsufficientBalance, PreconditionViolation
from .fixed_point import PRECISION, effective_time
from .weights import Checkpoint, StakeWeight, WeightPolicy

if TYPE_CHECKING:
    from ..custody.clock import Clock


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ParticipantRecord:
    """
    Checkpoint state for one participant.

    Attributes:
        weight: Current weight (stake balance, or 1/0 presence flag)
        accumulator_paid: Accumulator value at the last checkpoint
        settled_unclaimed: Rewards already earned and awaiting withdrawal
        last_activity_time: Last proof of liveness (headcount pools only)
        last_checkpoint_time: Ledger time of the last checkpoint
    """
    weight: int = 0
    accumulator_paid: int = 0
    settled_unclaimed: int = 0
    last_activity_time: int = 0
    last_checkpoint_time: int = 0

    @property
    def is_empty(self) -> bool:
        return self.weight == 0 and self.settled_unclaimed == 0


@dataclass(frozen=True)
class LedgerSnapshot:
    """Scalar ledger state plus copies of selected participant records."""
    total_weight: int
    reward_rate: int
    accumulator: int
    last_update_time: int
    round_start: int
    round_end: int
    undistributed_scaled: int
    total_reward_notified: int
    records: dict[str, ParticipantRecord | None] = field(default_factory=dict)


# =============================================================================
# Reward Ledger
# =============================================================================


class RewardLedger:
    """
    Accrual core shared by every pool type.

    The reward rate and the accumulator are scaled by ``precision``. Reward
    emitted while ``total_weight == 0`` and rewards forfeited by the weight
    policy go to the undistributed balance, which only a settlement sweep
    can drain.

    Usage:
        ledger = RewardLedger(clock)
        ledger.update("alice")            # flush + checkpoint
        ledger.increase_weight("alice", 1_000)
        ledger.earned("alice")
    """

    def __init__(
        self,
        clock: Clock,
        policy: WeightPolicy | None = None,
        precision: int = PRECISION,
    ):
        if precision <= 0:
            raise PreconditionViolation(f"precision must be positive, got {precision}")

        self.clock = clock
        self.policy = policy or StakeWeight()
        self.precision = precision

        self.total_weight = 0
        self.reward_rate = 0
        self.accumulator = 0
        self.last_update_time = 0
        self.round_start = 0  # start of the current uninterrupted emission
        self.round_end = 0
        self.total_reward_notified = 0
        self._undistributed_scaled = 0

        self.participants: dict[str, ParticipantRecord] = {}

    # -------------------------------------------------------------------------
    # Accumulator
    # -------------------------------------------------------------------------

    def now(self) -> int:
        return self.clock.now()

    def last_time_reward_applicable(self) -> int:
        return effective_time(self.now(), self.round_end)

    def pending_state(self, now: int | None = None) -> tuple[int, int, int]:
        """
        Project the accumulator forward without mutating the ledger.

        Returns:
            Tuple of (accumulator, undistributed_scaled, last_update_time)
        """
        now = self.now() if now is None else now
        until = effective_time(now, self.round_end)

        accumulator = self.accumulator
        undistributed = self._undistributed_scaled
        last_update = self.last_update_time

        if until > last_update:
            emitted = (until - last_update) * self.reward_rate
            if self.total_weight > 0:
                accumulator += emitted // self.total_weight
            else:
                undistributed += emitted
            last_update = until

        return accumulator, undistributed, last_update

    def flush(self) -> int:
        """Bring the accumulator up to date; returns the new ``last_update_time``."""
        self.accumulator, self._undistributed_scaled, self.last_update_time = self.pending_state()
        return self.last_update_time

    def reward_per_token(self) -> int:
        """Projected accumulator value (scaled by ``precision``)."""
        return self.pending_state()[0]

    # -------------------------------------------------------------------------
    # Checkpoints
    # -------------------------------------------------------------------------

    def record(self, participant: str) -> ParticipantRecord | None:
        return self.participants.get(participant)

    def ensure_record(self, participant: str) -> ParticipantRecord:
        """Get or create a record; new records start at the current accumulator."""
        record = self.participants.get(participant)
        if record is None:
            record = ParticipantRecord(
                accumulator_paid=self.accumulator,
                last_checkpoint_time=self.last_update_time,
            )
            self.participants[participant] = record
        return record

    def _pending(self, record: ParticipantRecord, accumulator: int) -> int:
        return record.weight * (accumulator - record.accumulator_paid) // self.precision

    def _split(self, record: ParticipantRecord, accumulator: int, window_end: int) -> Checkpoint:
        pending = self._pending(record, accumulator)
        window_start = max(record.last_checkpoint_time, self.round_start)
        return self.policy.split(record, pending, window_start, window_end)

    def checkpoint(self, participant: str, enforce_liveness: bool = False) -> Checkpoint:
        """
        Settle pending accrual for ``participant``; call right after :meth:`flush`.

        With ``enforce_liveness`` the weight policy may forfeit part of the
        pending accrual; otherwise everything pending is credited.
        """
        record = self.ensure_record(participant)
        if enforce_liveness:
            result = self._split(record, self.accumulator, self.last_update_time)
        else:
            result = Checkpoint(credited=self._pending(record, self.accumulator))

        record.settled_unclaimed += result.credited
        self._undistributed_scaled += result.forfeited * self.precision
        record.accumulator_paid = self.accumulator
        record.last_checkpoint_time = self.last_update_time

        if result.forfeited:
            logger.debug(
                "Forfeited stale accrual",
                participant=participant,
                credited=result.credited,
                forfeited=result.forfeited,
            )
        return result

    def update(self, participant: str | None = None, enforce_liveness: bool = False) -> Checkpoint:
        """Flush, then checkpoint ``participant`` (if given)."""
        self.flush()
        if participant is None:
            return Checkpoint()
        return self.checkpoint(participant, enforce_liveness)

    def earned(self, participant: str) -> int:
        """What ``settled_unclaimed`` would become after a flush + checkpoint."""
        record = self.participants.get(participant)
        if record is None:
            return 0
        accumulator = self.pending_state()[0]
        return record.settled_unclaimed + self._pending(record, accumulator)

    # -------------------------------------------------------------------------
    # Weight changes
    # -------------------------------------------------------------------------

    def _require_checkpointed(self, record: ParticipantRecord) -> None:
        if (
            record.accumulator_paid != self.accumulator
            or self.last_update_time < self.last_time_reward_applicable()
        ):
            raise RuntimeError("participant must be checkpointed before a weight change")

    def weight_of(self, participant: str) -> int:
        record = self.participants.get(participant)
        return record.weight if record else 0

    def increase_weight(self, participant: str, amount: int) -> int:
        if amount <= 0:
            raise PreconditionViolation(f"weight increase must be positive, got {amount}")
        record = self.ensure_record(participant)
        self._require_checkpointed(record)

        record.weight += amount
        self.total_weight += amount
        return record.weight

    def decrease_weight(self, participant: str, amount: int) -> int:
        if amount <= 0:
            raise PreconditionViolation(f"weight decrease must be positive, got {amount}")
        record = self.participants.get(participant)
        held = record.weight if record else 0
        if record is None or amount > held:
            raise InsufficientBalance(f"{participant} holds {held}, cannot remove {amount}")
        self._require_checkpointed(record)

        record.weight -= amount
        self.total_weight -= amount
        self.prune(participant)
        return held - amount

    def take_settled(self, participant: str) -> int:
        """Zero and return the participant's settled rewards."""
        record = self.participants.get(participant)
        if record is None:
            return 0
        amount = record.settled_unclaimed
        record.settled_unclaimed = 0
        self.prune(participant)
        return amount

    def prune(self, participant: str) -> None:
        record = self.participants.get(participant)
        if record is not None and record.is_empty:
            del self.participants[participant]

    # -------------------------------------------------------------------------
    # Undistributed balance
    # -------------------------------------------------------------------------

    @property
    def undistributed_reward(self) -> int:
        return self._undistributed_scaled // self.precision

    def add_undistributed(self, amount: int) -> None:
        self._undistributed_scaled += amount * self.precision

    def take_undistributed(self) -> int:
        """Remove the whole-unit part of the undistributed balance; dust stays."""
        amount = self._undistributed_scaled // self.precision
        self._undistributed_scaled -= amount * self.precision
        return amount

    def unemitted_reward(self) -> int:
        """Reward of the current round not yet flushed into the accumulator."""
        if self.round_end <= self.last_update_time:
            return 0
        return self.reward_rate * (self.round_end - self.last_update_time) // self.precision

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def snapshot(self, *participants: str) -> LedgerSnapshot:
        records = {
            p: replace(self.participants[p]) if p in self.participants else None
            for p in participants
        }
        return LedgerSnapshot(
            total_weight=self.total_weight,
            reward_rate=self.reward_rate,
            accumulator=self.accumulator,
            last_update_time=self.last_update_time,
            round_start=self.round_start,
            round_end=self.round_end,
            undistributed_scaled=self._undistributed_scaled,
            total_reward_notified=self.total_reward_notified,
            records=records,
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        self.total_weight = snapshot.total_weight
        self.reward_rate = snapshot.reward_rate
        self.accumulator = snapshot.accumulator
        self.last_update_time = snapshot.last_update_time
        self.round_start = snapshot.round_start
        self.round_end = snapshot.round_end
        self._undistributed_scaled = snapshot.undistributed_scaled
        self.total_reward_notified = snapshot.total_reward_notified

        for participant, record in snapshot.records.items():
            if record is None:
                self.participants.pop(participant, None)
            else:
                self.participants[participant] = replace(record)

    def to_dict(self) -> dict:
        return {
            "policy": self.policy.name,
            "total_weight": self.total_weight,
            "reward_rate": self.reward_rate,
            "accumulator": self.accumulator,
            "last_update_time": self.last_update_time,
            "round_start": self.round_start,
            "round_end": self.round_end,
            "undistributed_reward": self.undistributed_reward,
            "total_reward_notified": self.total_reward_notified,
            "participants": len(self.participants),
        }


__all__ = [
    "ParticipantRecord",
    "LedgerSnapshot",
    "RewardLedger",
]
