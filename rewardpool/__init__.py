"""
rewardpool - Reward Accrual Ledger

Lazy, O(1) reward accrual for pools of participants:

- RewardLedger: monotonic reward-per-weight accumulator with checkpoints
- StakingPool / FlashStakingPool: stake-weighted reward streaming
- WorkingPool: headcount-weighted rewards gated by liveness reports
- PoolDirectory: owner-managed pool registry and funding

Author: BelizeChain Team
License: MIT
"""

__version__ = "0.1.0"
__author__ = "BelizeChain Team"
__license__ = "MIT"

from rewardpool.errors import (
    RewardPoolError,
    PreconditionViolation,
    AlreadyRegistered,
    NotRegistered,
    AlreadyDeployed,
    UnknownPool,
    InsufficientBalance,
    NotAuthorized,
    NotYetFinished,
    TransferFailed,
)
from rewardpool.config import (
    RewardPoolConfig,
    LedgerConfig,
    WorkingPoolConfig,
    EventConfig,
    LoggingConfig,
    load_config,
)
from rewardpool.events import EventType, PoolEvent, EventLog
from rewardpool.ledger import (
    PRECISION,
    Checkpoint,
    HeadcountWeight,
    RewardLedger,
    StakeWeight,
    distribute_now,
    schedule_round,
)
from rewardpool.custody import AccessControl, ManualClock, SystemClock, TokenVault, NATIVE_TOKEN
from rewardpool.pools import (
    RewardPool,
    StakingPool,
    FlashStakingPool,
    WorkingPool,
    LivenessReport,
    PoolDirectory,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "RewardPoolError",
    "PreconditionViolation",
    "AlreadyRegistered",
    "NotRegistered",
    "AlreadyDeployed",
    "UnknownPool",
    "InsufficientBalance",
    "NotAuthorized",
    "NotYetFinished",
    "TransferFailed",
    # Configuration
    "RewardPoolConfig",
    "LedgerConfig",
    "WorkingPoolConfig",
    "EventConfig",
    "LoggingConfig",
    "load_config",
    # Events
    "EventType",
    "PoolEvent",
    "EventLog",
    # Ledger
    "PRECISION",
    "Checkpoint",
    "HeadcountWeight",
    "RewardLedger",
    "StakeWeight",
    "distribute_now",
    "schedule_round",
    # Custody
    "AccessControl",
    "ManualClock",
    "SystemClock",
    "TokenVault",
    "NATIVE_TOKEN",
    # Pools
    "RewardPool",
    "StakingPool",
    "FlashStakingPool",
    "WorkingPool",
    "LivenessReport",
    "PoolDirectory",
]
