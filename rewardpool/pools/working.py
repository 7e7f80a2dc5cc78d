"""
Working Pool

Headcount-weighted pool: every registered worker holds weight 1 and earns an
equal share of the reward stream while it keeps proving liveness. A worker
that stays silent for longer than ``max_report_span`` goes stale, and the
accrual of its stale time is forfeited to the undistributed balance when
its next compliant report arrives late. Claims and exits credit whatever
has accrued.

Reward deposited before the first worker registers is queued; the round
clock starts with the first registration so nothing is emitted into an
empty pool.

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass
from typing import Any

from loguru import logger

from ..config import LedgerConfig, WorkingPoolConfig
from ..custody.access import AccessControl
from ..custody.clock import Clock
from ..custody.vault import TransferService
from ..errors import AlreadyRegistered, NotRegistered
from ..events import EventLog, EventType
from ..ledger.scheduler import RoundUpdate, schedule_round
from ..ledger.weights import Checkpoint, HeadcountWeight
from .base import RewardPool, require_account, require_positive


@dataclass(frozen=True)
class LivenessReport:
    """One liveness observation for a worker."""

    participant: str
    timestamp: int
    compliant: bool
    in_window: bool
    credited: int = 0
    forfeited: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class WorkingPool(RewardPool):
    """
    Headcount-weighted reward pool with liveness-gated accrual.

    Usage:
        pool = WorkingPool("pool/work", "RWD", vault, access, clock)
        pool.notify_reward("owner", 24_000, duration=1)
        pool.register("worker-1")
        pool.submit_liveness_report("worker-1", compliant=True)
        pool.claim_rewards("worker-1")
    """

    pool_type = "working"

    def __init__(
        self,
        address: str,
        reward_token: str,
        vault: TransferService,
        access: AccessControl,
        clock: Clock,
        events: EventLog | None = None,
        config: LedgerConfig | None = None,
        working_config: WorkingPoolConfig | None = None,
    ):
        self.working_config = working_config or WorkingPoolConfig()
        self.policy = HeadcountWeight(self.working_config.max_report_span_seconds)
        super().__init__(
            address,
            reward_token,
            vault,
            access,
            clock,
            policy=self.policy,
            events=events,
            config=config,
        )

        self.started = False
        self.queued_amount = 0
        self.queued_duration = 0
        self.reports: deque[LivenessReport] = deque(
            maxlen=self.working_config.report_history_size
        )

    @property
    def max_report_span(self) -> int:
        return self.policy.max_report_span

    # -------------------------------------------------------------------------
    # Rewards
    # -------------------------------------------------------------------------

    def notify_reward(self, caller: str, amount: int, duration: int) -> RoundUpdate | None:
        """
        Deposit reward for the workers.

        Before the first registration the deposit is queued (amounts add up,
        the latest duration wins) and the round starts on that registration.
        Afterwards rounds are scheduled immediately.
        """
        if self.started:
            return super().notify_reward(caller, amount, duration)

        self.access.require_rewarder(caller)
        if amount == 0:
            return None
        require_positive(amount)
        seconds = self.duration_seconds(duration)

        with self._transaction("notify_reward", caller):
            self._transfer_in(self.reward_token, caller, amount)
            self.queued_amount += amount
            self.queued_duration = seconds
            self.ledger.total_reward_notified += amount
            self._emit(
                EventType.REWARD_ADDED,
                caller,
                amount=amount,
                duration=duration,
                queued=self.queued_amount,
            )

        logger.info("Queued reward until first registration", pool=self.address, queued=self.queued_amount)
        return None

    def _start_round(self) -> RoundUpdate | None:
        self.started = True
        if self.queued_amount == 0:
            return None

        update = schedule_round(
            self.ledger, self.queued_amount, self.queued_duration, notified=False
        )
        self.queued_amount = 0
        self.queued_duration = 0
        return update

    # -------------------------------------------------------------------------
    # Workers
    # -------------------------------------------------------------------------

    def is_active(self, participant: str) -> bool:
        return self.ledger.weight_of(participant) > 0

    def _require_active(self, participant: str) -> None:
        if not self.is_active(participant):
            raise NotRegistered(f"{participant} is not a registered worker")

    def register(self, participant: str) -> int:
        """
        Register ``participant`` as an active worker.

        Raises:
            AlreadyRegistered: If the worker is already active

        Returns:
            Number of active workers
        """
        require_account(participant)

        with self._transaction("register", participant, participant):
            if self.is_active(participant):
                raise AlreadyRegistered(f"{participant} is already registered")
            self.ledger.update(participant)
            self.ledger.increase_weight(participant, 1)
            self.ledger.record(participant).last_activity_time = self.clock.now()

            update = None
            if not self.started:
                update = self._start_round()
            self._emit(
                EventType.WORKER_REGISTERED,
                participant,
                total_workers=self.ledger.total_weight,
                period_finish=self.ledger.round_end,
            )

        if update is not None:
            logger.success(
                "Started queued reward round",
                pool=self.address,
                amount=update.amount,
                period_finish=update.round_end,
            )
        return self.ledger.total_weight

    def exit(self, participant: str) -> Checkpoint:
        """
        Deregister ``participant``; its unclaimed rewards stay claimable.

        Raises:
            NotRegistered: If the worker is not active
        """
        require_account(participant)

        with self._transaction("exit", participant, participant):
            self._require_active(participant)
            result = self.ledger.update(participant)
            self.ledger.decrease_weight(participant, 1)
            self._emit(
                EventType.WORKER_EXITED,
                participant,
                credited=result.credited,
                unclaimed=self.ledger.earned(participant),
                total_workers=self.ledger.total_weight,
            )
        return result

    def submit_liveness_report(self, participant: str, compliant: bool) -> LivenessReport:
        """
        Record a liveness observation for ``participant``.

        A compliant report checkpoints the worker (forfeiting accrual from
        any stale stretch since its previous report) and renews its freshness
        deadline. A non-compliant report is recorded only.

        Raises:
            NotRegistered: If the worker is not active
        """
        require_account(participant)

        with self._transaction("submit_liveness_report", participant, participant):
            self._require_active(participant)
            now = self.clock.now()
            record = self.ledger.record(participant)
            silent_for = now - record.last_activity_time
            in_window = self.policy.in_window(record, now)

            result = Checkpoint()
            if compliant:
                result = self.ledger.update(participant, enforce_liveness=True)
                record.last_activity_time = now

            report = LivenessReport(
                participant=participant,
                timestamp=now,
                compliant=compliant,
                in_window=in_window,
                credited=result.credited,
                forfeited=result.forfeited,
            )
            self._emit_forfeit(participant, result)
            self._emit(
                EventType.LIVENESS_REPORTED,
                participant,
                compliant=compliant,
                in_window=in_window,
                credited=result.credited,
            )
            self.reports.append(report)

        if not in_window:
            logger.warning(
                "Late liveness report",
                participant=participant,
                silent_for=silent_for,
                forfeited=report.forfeited,
            )
        return report

    def _emit_forfeit(self, participant: str, result: Checkpoint) -> None:
        if result.forfeited:
            self._emit(
                EventType.REWARD_FORFEITED,
                participant,
                amount=result.forfeited,
                credited=result.credited,
            )

    def claim_rewards(self, participant: str) -> int:
        """Pay out everything ``participant`` has earned."""
        return self.get_reward(participant)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def total_workers(self) -> int:
        return self.ledger.total_weight

    def fresh_until(self, participant: str) -> int | None:
        """Freshness deadline of an active worker (None if not registered)."""
        record = self.ledger.record(participant)
        if record is None or record.weight == 0:
            return None
        return self.policy.fresh_until(record)

    def get_report_history(self, participant: str | None = None, limit: int = 100) -> list[LivenessReport]:
        reports = list(self.reports)
        if participant:
            reports = [r for r in reports if r.participant == participant]
        return reports[-limit:]

    def get_statistics(self) -> dict:
        stats = super().get_statistics()
        stats.update(
            {
                "max_report_span": self.max_report_span,
                "started": self.started,
                "queued_amount": self.queued_amount,
                "reports": len(self.reports),
            }
        )
        return stats


__all__ = ["LivenessReport", "WorkingPool"]
