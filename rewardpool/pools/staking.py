"""
Staking Pool

Stake-weighted pool: each participant's weight is the amount of staking token
deposited. Rewards stream in over scheduled rounds and are shared pro rata.

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

from loguru import logger

from ..config import LedgerConfig
from ..custody.access import AccessControl
from ..custody.clock import Clock
from ..custody.vault import TransferService
from ..events import EventLog, EventType
from ..ledger.weights import StakeWeight
from .base import RewardPool, require_account, require_positive


class StakingPool(RewardPool):
    """
    Stake-weighted reward pool.

    Usage:
        pool = StakingPool("pool/STK", "STK", "RWD", vault, access, clock)
        pool.stake("alice", 9_000)
        pool.notify_reward("owner", 1_000_000, duration=1)
        pool.get_reward("alice")
    """

    pool_type = "staking"

    def __init__(
        self,
        address: str,
        staking_token: str,
        reward_token: str,
        vault: TransferService,
        access: AccessControl,
        clock: Clock,
        events: EventLog | None = None,
        config: LedgerConfig | None = None,
    ):
        require_account(staking_token, "staking token")
        self.staking_token = staking_token
        super().__init__(
            address,
            reward_token,
            vault,
            access,
            clock,
            policy=StakeWeight(),
            events=events,
            config=config,
        )

    def stake(self, participant: str, amount: int) -> int:
        """
        Deposit ``amount`` of staking token.

        Returns:
            New stake balance of ``participant``
        """
        require_account(participant)
        require_positive(amount)

        with self._transaction("stake", participant, participant):
            self.ledger.update(participant)
            balance = self.ledger.increase_weight(participant, amount)
            self._transfer_in(self.staking_token, participant, amount)
            self._emit(
                EventType.STAKED,
                participant,
                amount=amount,
                balance=balance,
                total_supply=self.ledger.total_weight,
            )

        logger.debug("Staked", participant=participant, amount=amount, balance=balance)
        return balance

    def withdraw(self, participant: str, amount: int) -> int:
        """
        Withdraw ``amount`` of staking token.

        Raises:
            InsufficientBalance: If ``amount`` exceeds the stake

        Returns:
            Remaining stake balance
        """
        require_account(participant)
        require_positive(amount)

        with self._transaction("withdraw", participant, participant):
            self.ledger.update(participant)
            balance = self.ledger.decrease_weight(participant, amount)
            self._transfer_out(self.staking_token, participant, amount)
            self._emit(
                EventType.WITHDRAWN,
                participant,
                amount=amount,
                balance=balance,
                total_supply=self.ledger.total_weight,
            )

        logger.debug("Withdrew", participant=participant, amount=amount, balance=balance)
        return balance

    def exit(self, participant: str) -> tuple[int, int]:
        """
        Withdraw the whole stake and claim all rewards in one step.

        Returns:
            Tuple of (withdrawn stake, reward paid)
        """
        require_account(participant)
        with self._transaction("exit", participant, participant):
            balance = self.ledger.weight_of(participant)
            if balance > 0:
                self.withdraw(participant, balance)
            paid = self.get_reward(participant)
        return balance, paid

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def total_supply(self) -> int:
        return self.ledger.total_weight

    def balance_of(self, participant: str) -> int:
        return self.ledger.weight_of(participant)

    def get_statistics(self) -> dict:
        stats = super().get_statistics()
        stats["staking_token"] = self.staking_token
        return stats


__all__ = ["StakingPool"]
