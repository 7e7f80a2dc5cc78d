"""
Flash Staking Pool

Staking pool whose rewards can also be distributed instantly: a deposit via
``add_rewards`` bumps the accumulator at once instead of streaming over a
round. Stakers present at that moment share it pro rata.

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

from loguru import logger

from ..events import EventType
from ..ledger.scheduler import Distribution, distribute_now
from .base import require_positive
from .staking import StakingPool


class FlashStakingPool(StakingPool):
    """Stake-weighted pool with instant reward distribution."""

    pool_type = "flash"

    def add_rewards(self, caller: str, amount: int) -> Distribution | None:
        """
        Distribute ``amount`` of reward to current stakers immediately.

        With no stake in the pool the amount goes to the undistributed
        balance. A zero amount is a no-op.

        Args:
            caller: Rewarder account funding the deposit
            amount: Reward amount (base units)

        Returns:
            Distribution, or None for a zero deposit
        """
        self.access.require_rewarder(caller)
        if amount == 0:
            return None
        require_positive(amount)

        with self._transaction("add_rewards", caller):
            self._transfer_in(self.reward_token, caller, amount)
            distribution = distribute_now(self.ledger, amount)
            self._emit(
                EventType.REWARD_ADDED,
                caller,
                amount=amount,
                duration=0,
                undistributed=distribution.undistributed,
            )

        logger.success(
            "Instant reward distributed",
            pool=self.address,
            amount=amount,
            stakers_weight=self.ledger.total_weight,
        )
        return distribution


__all__ = ["FlashStakingPool"]
