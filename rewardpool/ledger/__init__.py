"""
Reward accrual core.

Components:
- effective_time: accrual time window
- RewardLedger: accumulator, checkpoints and weight bookkeeping
- schedule_round / distribute_now: reward deposits
- StakeWeight / HeadcountWeight: pluggable weight policies
- sweep_undistributed: post-round settlement
"""

from .fixed_point import (
    PRECISION,
    SECONDS_PER_DAY,
    effective_time,
    mul_div,
    to_units,
    from_units,
    format_amount,
)
from .weights import Checkpoint, WeightPolicy, StakeWeight, HeadcountWeight
from .accumulator import ParticipantRecord, LedgerSnapshot, RewardLedger
from .scheduler import RoundUpdate, Distribution, schedule_round, distribute_now
from .settlement import ensure_finished, sweep_undistributed

__all__ = [
    "PRECISION",
    "SECONDS_PER_DAY",
    "effective_time",
    "mul_div",
    "to_units",
    "from_units",
    "format_amount",
    "Checkpoint",
    "WeightPolicy",
    "StakeWeight",
    "HeadcountWeight",
    "ParticipantRecord",
    "LedgerSnapshot",
    "RewardLedger",
    "RoundUpdate",
    "Distribution",
    "schedule_round",
    "distribute_now",
    "ensure_finished",
    "sweep_undistributed",
]
