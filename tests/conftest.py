"""
Pytest configuration and shared fixtures for rewardpool tests.

This module provides reusable test fixtures for:
- Temporary directories and file management
- Manual clock, in-memory vault and access control
- Staking, flash and working pools wired to a shared event log
- Pool directory

Author: BelizeChain Team
License: MIT
"""

import tempfile
from pathlib import Path

import pytest

from rewardpool.config import LedgerConfig, RewardPoolConfig, WorkingPoolConfig
from rewardpool.custody import AccessControl, ManualClock, TokenVault
from rewardpool.events import EventLog
from rewardpool.ledger import RewardLedger
from rewardpool.pools import (
    FlashStakingPool,
    PoolDirectory,
    StakingPool,
    WorkingPool,
)


START = 1_700_000_000
HOUR = 3600
DAY = 86400

OWNER = "owner"
REWARD_TOKEN = "RWD"
STAKING_TOKEN = "STK"


# ============================================================================
# Directory Fixtures
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Collaborator Fixtures
# ============================================================================

@pytest.fixture
def clock():
    """Manual clock starting at a fixed timestamp."""
    return ManualClock(START)


@pytest.fixture
def vault():
    """In-memory vault with reward and staking token balances."""
    vault = TokenVault()
    vault.mint(REWARD_TOKEN, OWNER, 10 ** 30)
    for account in ("alice", "bob", "carol"):
        vault.mint(STAKING_TOKEN, account, 1_000_000)
    return vault


@pytest.fixture
def access():
    """Access control owned by OWNER."""
    return AccessControl(OWNER)


@pytest.fixture
def event_log():
    """Shared event log."""
    return EventLog()


@pytest.fixture
def ledger(clock):
    """Bare stake-weighted ledger."""
    return RewardLedger(clock)


# ============================================================================
# Pool Fixtures
# ============================================================================

@pytest.fixture
def staking_pool(vault, access, clock, event_log):
    """Stake-weighted pool with one-day duration units."""
    return StakingPool(
        "pool/STK",
        STAKING_TOKEN,
        REWARD_TOKEN,
        vault,
        access,
        clock,
        events=event_log,
        config=LedgerConfig(),
    )


@pytest.fixture
def flash_pool(vault, access, clock, event_log):
    """Staking pool with instant distribution."""
    return FlashStakingPool(
        "pool/flash",
        STAKING_TOKEN,
        REWARD_TOKEN,
        vault,
        access,
        clock,
        events=event_log,
    )


@pytest.fixture
def working_pool(vault, access, clock, event_log):
    """Headcount pool with a one-hour liveness span."""
    return WorkingPool(
        "pool/work",
        REWARD_TOKEN,
        vault,
        access,
        clock,
        events=event_log,
        working_config=WorkingPoolConfig(max_report_span_seconds=HOUR),
    )


@pytest.fixture
def directory(vault, clock, event_log):
    """Pool directory owned by OWNER."""
    return PoolDirectory(OWNER, REWARD_TOKEN, vault, clock, config=RewardPoolConfig(), events=event_log)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "scenario: end-to-end reward schedules replayed on a pool"
    )
    config.addinivalue_line(
        "markers", "conservation: checks that no reward mass is created or lost"
    )
