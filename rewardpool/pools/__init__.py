"""
Reward pools: stake-weighted, instant-distribution and headcount-weighted
pools over the shared accrual ledger, plus the owner-managed pool directory.
"""

from .base import RewardPool
from .directory import POOL_TYPES, PoolDirectory, PoolInfo
from .flash import FlashStakingPool
from .staking import StakingPool
from .working import LivenessReport, WorkingPool

__all__ = [
    "RewardPool",
    "StakingPool",
    "FlashStakingPool",
    "WorkingPool",
    "LivenessReport",
    "PoolDirectory",
    "PoolInfo",
    "POOL_TYPES",
]
