"""
Pool Directory

Owner-managed registry of reward pools, one per staking token (or worker
group key). The directory deploys pools, funds them on behalf of rewarders
and keeps the cumulative reward amount sent to each.

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from loguru import logger

from ..config import RewardPoolConfig
from ..custody.access import AccessControl
from ..custody.clock import Clock
from ..custody.vault import TransferService
from ..errors import AlreadyDeployed, PreconditionViolation, UnknownPool
from ..events import EventLog, EventType, PoolEvent
from ..ledger.scheduler import Distribution, RoundUpdate
from .base import RewardPool, require_account
from .flash import FlashStakingPool
from .staking import StakingPool
from .working import WorkingPool


POOL_TYPES = ("staking", "flash", "working")


@dataclass(frozen=True)
class PoolInfo:
    """Directory entry for a deployed pool."""

    key: str
    pool: RewardPool
    total_rewards_amount: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "address": self.pool.address,
            "pool_type": self.pool.pool_type,
            "total_rewards_amount": self.total_rewards_amount,
        }


class PoolDirectory:
    """
    Registry and funding front end for reward pools.

    All deployed pools share the directory's access control, event log and
    clock. Only the owner deploys pools and manages rewarders; any rewarder
    can fund a pool.

    Usage:
        directory = PoolDirectory("owner", "RWD", vault, clock)
        pool = directory.deploy("owner", "STK")
        directory.add_rewards("owner", "STK", 1_000_000, duration=7)
    """

    def __init__(
        self,
        owner: str,
        reward_token: str,
        vault: TransferService,
        clock: Clock,
        config: RewardPoolConfig | None = None,
        events: EventLog | None = None,
        address: str = "directory",
    ):
        require_account(reward_token, "reward token")

        self.address = address
        self.reward_token = reward_token
        self.vault = vault
        self.clock = clock
        self.config = config or RewardPoolConfig()
        self.access = AccessControl(owner)
        self.events = events or EventLog(self.config.events.max_history_size)

        self.pools: dict[str, RewardPool] = {}
        self.total_rewards_amount: dict[str, int] = {}
        self._lock = threading.RLock()

        logger.info("Initialized PoolDirectory", owner=owner, reward_token=reward_token)

    @property
    def owner(self) -> str:
        return self.access.owner

    def _emit(self, event_type: EventType, actor: str, **data: Any) -> None:
        self.events.publish(
            PoolEvent(
                event_type=event_type,
                pool=self.address,
                actor=actor,
                timestamp=self.clock.now(),
                data=data,
            )
        )

    # -------------------------------------------------------------------------
    # Pools
    # -------------------------------------------------------------------------

    def deploy(self, caller: str, staking_token: str, pool_type: str = "staking") -> RewardPool:
        """
        Deploy a pool for ``staking_token``.

        Args:
            caller: Must be the owner
            staking_token: Directory key (the staked token, or a worker group id)
            pool_type: One of "staking", "flash", "working"

        Raises:
            NotAuthorized: If caller is not the owner
            AlreadyDeployed: If a pool exists for the key
        """
        self.access.require_owner(caller)
        require_account(staking_token, "staking token")
        if pool_type not in POOL_TYPES:
            raise PreconditionViolation(f"unknown pool type: {pool_type}")

        with self._lock:
            if staking_token in self.pools:
                raise AlreadyDeployed(f"pool for {staking_token} already deployed")

            pool = self._build_pool(staking_token, pool_type)
            self.pools[staking_token] = pool
            self.total_rewards_amount[staking_token] = 0

        self._emit(
            EventType.POOL_DEPLOYED,
            caller,
            staking_token=staking_token,
            pool_address=pool.address,
            pool_type=pool_type,
        )
        return pool

    def _build_pool(self, staking_token: str, pool_type: str) -> RewardPool:
        address = f"pool/{staking_token}"
        common = {
            "vault": self.vault,
            "access": self.access,
            "clock": self.clock,
            "events": self.events,
            "config": self.config.ledger,
        }
        if pool_type == "working":
            return WorkingPool(
                address,
                self.reward_token,
                working_config=self.config.working,
                **common,
            )
        pool_class = FlashStakingPool if pool_type == "flash" else StakingPool
        return pool_class(address, staking_token, self.reward_token, **common)

    def get_pool(self, staking_token: str) -> RewardPool:
        pool = self.pools.get(staking_token)
        if pool is None:
            raise UnknownPool(f"no pool deployed for {staking_token}")
        return pool

    def pool_info(self, staking_token: str) -> PoolInfo:
        pool = self.get_pool(staking_token)
        return PoolInfo(
            key=staking_token,
            pool=pool,
            total_rewards_amount=self.total_rewards_amount[staking_token],
        )

    def list_pools(self) -> list[PoolInfo]:
        return [self.pool_info(key) for key in self.pools]

    # -------------------------------------------------------------------------
    # Funding
    # -------------------------------------------------------------------------

    def add_rewards(
        self,
        caller: str,
        staking_token: str,
        amount: int,
        duration: int,
    ) -> RoundUpdate | Distribution | None:
        """
        Fund the pool for ``staking_token`` with ``amount`` over ``duration`` units.

        The reward token is pulled from ``caller``. A flash pool funded with
        ``duration == 0`` distributes instantly and returns a Distribution.
        Flash pools keep the streaming ``notify_reward`` of staking pools, so
        a non-zero ``duration`` schedules a regular round on them.
        """
        self.access.require_rewarder(caller)
        pool = self.get_pool(staking_token)

        if isinstance(pool, FlashStakingPool) and duration == 0:
            result = pool.add_rewards(caller, amount)
        else:
            result = pool.notify_reward(caller, amount, duration)

        if amount:
            with self._lock:
                self.total_rewards_amount[staking_token] += amount
        return result

    # -------------------------------------------------------------------------
    # Roles
    # -------------------------------------------------------------------------

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        previous = self.access.transfer_ownership(caller, new_owner)
        self._emit(EventType.OWNERSHIP_TRANSFERRED, caller, previous_owner=previous, new_owner=new_owner)

    def add_rewarder(self, caller: str, account: str) -> bool:
        added = self.access.add_rewarder(caller, account)
        if added:
            self._emit(EventType.REWARDER_ADDED, caller, rewarder=account)
        return added

    def remove_rewarder(self, caller: str, account: str) -> bool:
        removed = self.access.remove_rewarder(caller, account)
        if removed:
            self._emit(EventType.REWARDER_REMOVED, caller, rewarder=account)
        return removed

    def is_rewarder(self, account: str) -> bool:
        return self.access.is_rewarder(account)


__all__ = ["POOL_TYPES", "PoolInfo", "PoolDirectory"]
