"""
Reward Pool Base

Shared surface of every pool type: reward deposits, reward payout, earned
projection and the post-round settlement sweep. Each public operation runs as
one transaction under the pool lock:

1. snapshot the ledger scalars and the touched participant records
2. flush + checkpoint the actor, apply the operation, move tokens
3. on success publish buffered events; on any failure restore the snapshot,
   reverse completed transfers and discard the events

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from loguru import logger

from ..config import LedgerConfig
from ..custody.access import AccessControl
from ..custody.clock import Clock
from ..custody.vault import TransferService
from ..errors import PreconditionViolation
from ..events import EventLog, EventType, PoolEvent
from ..ledger.accumulator import RewardLedger
from ..ledger.scheduler import RoundUpdate, schedule_round
from ..ledger.settlement import sweep_undistributed
from ..ledger.weights import WeightPolicy
from ..monitoring.logging_config import LogContext, log_rejected


def require_account(account: str, role: str = "participant") -> None:
    if not account or not isinstance(account, str):
        raise PreconditionViolation(f"{role} must be a non-empty account id")


def require_positive(amount: int, name: str = "amount") -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise PreconditionViolation(f"{name} must be an integer, got {type(amount).__name__}")
    if amount <= 0:
        raise PreconditionViolation(f"{name} must be positive, got {amount}")


class RewardPool:
    """
    Base class for reward pools.

    Subclasses choose the weight policy and add their participant operations
    on top of the shared ledger.
    """

    pool_type = "base"

    def __init__(
        self,
        address: str,
        reward_token: str,
        vault: TransferService,
        access: AccessControl,
        clock: Clock,
        policy: WeightPolicy | None = None,
        events: EventLog | None = None,
        config: LedgerConfig | None = None,
    ):
        """
        Initialize reward pool.

        Args:
            address: Custody account of the pool inside the vault
            reward_token: Token paid out as reward
            vault: Value transfer service
            access: Owner/rewarder capability checks
            clock: Time source
            policy: Weight policy for the ledger
            events: Event log (a private one is created if None)
            config: Ledger configuration
        """
        require_account(address, "pool address")
        require_account(reward_token, "reward token")

        self.address = address
        self.reward_token = reward_token
        self.vault = vault
        self.access = access
        self.clock = clock
        self.config = config or LedgerConfig()
        self.events = events or EventLog()
        self.ledger = RewardLedger(clock, policy, precision=self.config.precision)

        self.total_reward_paid = 0
        self.total_swept = 0

        self._lock = threading.RLock()
        self._pending_events: list[PoolEvent] | None = None
        self._compensations: list[Callable[[], None]] = []

        logger.info(
            f"Initialized {type(self).__name__}",
            address=address,
            reward_token=reward_token,
            policy=self.ledger.policy.name,
        )

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @contextmanager
    def _transaction(self, operation: str, actor: str, *participants: str) -> Iterator[None]:
        """Run one atomic pool operation; nested calls join the outer transaction."""
        with self._lock:
            if self._pending_events is not None:
                yield
                return

            snapshot = self.ledger.snapshot(*participants)
            counters = (self.total_reward_paid, self.total_swept)
            self._pending_events = []
            self._compensations = []
            try:
                with LogContext(pool=self.address, operation=operation):
                    yield
            except Exception as e:
                self.ledger.restore(snapshot)
                self.total_reward_paid, self.total_swept = counters
                self._undo_transfers()
                log_rejected(operation, actor, e)
                raise
            else:
                for event in self._pending_events:
                    self.events.publish(event)
            finally:
                self._pending_events = None
                self._compensations = []

    def _undo_transfers(self) -> None:
        for undo in reversed(self._compensations):
            try:
                undo()
            except Exception as e:
                logger.error("Failed to reverse transfer", pool=self.address, error=str(e))

    def _emit(self, event_type: EventType, actor: str, **data: Any) -> None:
        event = PoolEvent(
            event_type=event_type,
            pool=self.address,
            actor=actor,
            timestamp=self.clock.now(),
            data=data,
        )
        if self._pending_events is None:
            self.events.publish(event)
        else:
            self._pending_events.append(event)

    def _transfer_in(self, token: str, source: str, amount: int) -> None:
        self.vault.pull(token, source, self.address, amount)
        self._compensations.append(
            lambda: self.vault.push(token, self.address, source, amount)
        )

    def _transfer_out(self, token: str, destination: str, amount: int) -> None:
        self.vault.push(token, self.address, destination, amount)
        self._compensations.append(
            lambda: self.vault.pull(token, destination, self.address, amount)
        )

    # -------------------------------------------------------------------------
    # Rewards
    # -------------------------------------------------------------------------

    def duration_seconds(self, duration: int) -> int:
        """Convert a duration in policy units to seconds."""
        if not isinstance(duration, int) or duration <= 0:
            raise PreconditionViolation(f"duration must be a positive integer, got {duration}")
        return duration * self.config.duration_unit_seconds

    def notify_reward(self, caller: str, amount: int, duration: int) -> RoundUpdate | None:
        """
        Deposit ``amount`` of reward to be emitted over ``duration`` units.

        Any unspent reward of a round still running is blended into the new
        rate. A zero amount is a no-op.

        Args:
            caller: Rewarder account funding the deposit
            amount: Reward amount (base units)
            duration: Round length in duration units (days by default)

        Returns:
            RoundUpdate, or None for a zero deposit
        """
        self.access.require_rewarder(caller)
        if amount == 0:
            return None
        require_positive(amount)
        seconds = self.duration_seconds(duration)

        with self._transaction("notify_reward", caller):
            self._transfer_in(self.reward_token, caller, amount)
            update = schedule_round(self.ledger, amount, seconds)
            self._emit(
                EventType.REWARD_ADDED,
                caller,
                amount=amount,
                duration=duration,
                reward_rate=update.reward_rate,
                period_finish=update.round_end,
            )

        logger.success(
            "Reward round scheduled",
            pool=self.address,
            amount=amount,
            leftover=update.leftover,
            period_finish=update.round_end,
        )
        return update

    def earned(self, participant: str) -> int:
        """Rewards claimable by ``participant`` right now (no state change)."""
        with self._lock:
            return self.ledger.earned(participant)

    def get_reward(self, participant: str) -> int:
        """
        Pay out everything ``participant`` has earned.

        Returns:
            Amount paid (zero is a no-op and emits nothing)
        """
        require_account(participant)
        with self._transaction("get_reward", participant, participant):
            self.ledger.update(participant)
            return self._pay_reward(participant)

    def _pay_reward(self, participant: str) -> int:
        amount = self.ledger.take_settled(participant)
        if amount == 0:
            return 0
        self._transfer_out(self.reward_token, participant, amount)
        self.total_reward_paid += amount
        self._emit(EventType.REWARD_PAID, participant, amount=amount)
        return amount

    def settlement_sweep(self, collector: str) -> int:
        """
        Send all undistributed reward to ``collector`` once the round is over.

        Callable by anyone. Fails with NotYetFinished before the first round
        or while a round is still running.

        Returns:
            Amount swept (zero is valid)
        """
        require_account(collector, "collector")
        with self._transaction("settlement_sweep", collector):
            amount = sweep_undistributed(self.ledger)
            if amount:
                self._transfer_out(self.reward_token, collector, amount)
                self.total_swept += amount
            self._emit(EventType.SETTLED, collector, amount=amount)

        logger.success("Settlement sweep", pool=self.address, collector=collector, amount=amount)
        return amount

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def reward_rate(self) -> int:
        """Reward per second in base units (floored)."""
        return self.ledger.reward_rate // self.ledger.precision

    @property
    def period_finish(self) -> int:
        return self.ledger.round_end

    @property
    def undistributed_reward(self) -> int:
        return self.ledger.pending_state()[1] // self.ledger.precision

    @property
    def total_reward_notified(self) -> int:
        return self.ledger.total_reward_notified

    def last_time_reward_applicable(self) -> int:
        return self.ledger.last_time_reward_applicable()

    def reward_per_token(self) -> int:
        return self.ledger.reward_per_token()

    def get_statistics(self) -> dict[str, Any]:
        """
        Get pool statistics.

        Returns:
            Statistics dictionary
        """
        stats = self.ledger.to_dict()
        stats.update(
            {
                "pool_type": self.pool_type,
                "address": self.address,
                "reward_token": self.reward_token,
                "total_reward_paid": self.total_reward_paid,
                "total_swept": self.total_swept,
                "undistributed_reward": self.undistributed_reward,
            }
        )
        return stats


__all__ = ["RewardPool", "require_account", "require_positive"]
