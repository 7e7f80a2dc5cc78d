"""
Tests for the pool directory.

Tests deployment, funding, ownership transfer and rewarder management.

Author: BelizeChain Team
License: MIT
"""

import pytest

from rewardpool.errors import (
    AlreadyDeployed,
    NotAuthorized,
    PreconditionViolation,
    UnknownPool,
)
from rewardpool.events import EventType
from rewardpool.pools import FlashStakingPool, StakingPool, WorkingPool


DAY = 86400
OWNER = "owner"
RWD = "RWD"
STK = "STK"


class TestDeployment:
    """Test suite for PoolDirectory.deploy."""

    def test_deploy(self, directory, event_log):
        pool = directory.deploy(OWNER, STK)

        assert isinstance(pool, StakingPool)
        assert pool.staking_token == STK
        assert pool.reward_token == RWD
        assert directory.get_pool(STK) is pool

        event = event_log.last(EventType.POOL_DEPLOYED)
        assert event.pool == "directory"
        assert event.data["staking_token"] == STK
        assert event.data["pool_address"] == pool.address

    def test_deploy_twice(self, directory):
        directory.deploy(OWNER, STK)
        with pytest.raises(AlreadyDeployed, match="already deployed"):
            directory.deploy(OWNER, STK)

    def test_deploy_requires_owner(self, directory):
        with pytest.raises(NotAuthorized, match="caller is not the owner"):
            directory.deploy("mallory", STK)

    def test_pool_types(self, directory):
        assert isinstance(directory.deploy(OWNER, "FLASH", "flash"), FlashStakingPool)
        assert isinstance(directory.deploy(OWNER, "workers", "working"), WorkingPool)
        with pytest.raises(PreconditionViolation):
            directory.deploy(OWNER, "other", "bonded")

    def test_unknown_pool(self, directory):
        with pytest.raises(UnknownPool):
            directory.get_pool("nope")

    def test_pools_share_directory_roles(self, directory):
        pool = directory.deploy(OWNER, STK)
        directory.add_rewarder(OWNER, "funder")
        assert pool.access.is_rewarder("funder")


class TestFunding:
    """Test suite for PoolDirectory.add_rewards."""

    def test_add_rewards(self, directory, vault, clock):
        pool = directory.deploy(OWNER, STK)
        pool.stake("alice", 100)

        directory.add_rewards(OWNER, STK, 864_000, 1)
        directory.add_rewards(OWNER, STK, 864_000, 1)

        info = directory.pool_info(STK)
        assert info.pool is pool
        assert info.total_rewards_amount == 1_728_000
        assert vault.balance_of(RWD, pool.address) == 1_728_000
        assert pool.period_finish == clock.now() + DAY

    def test_add_rewards_requires_rewarder(self, directory):
        directory.deploy(OWNER, STK)
        with pytest.raises(NotAuthorized, match="not a rewarder"):
            directory.add_rewards("mallory", STK, 1_000, 1)

    def test_add_rewards_unknown_pool(self, directory):
        with pytest.raises(UnknownPool):
            directory.add_rewards(OWNER, "nope", 1_000, 1)

    def test_zero_reward_not_recorded(self, directory):
        directory.deploy(OWNER, STK)
        assert directory.add_rewards(OWNER, STK, 0, 1) is None
        assert directory.pool_info(STK).total_rewards_amount == 0

    def test_flash_pool_instant_funding(self, directory):
        pool = directory.deploy(OWNER, STK, "flash")
        pool.stake("alice", 10)

        directory.add_rewards(OWNER, STK, 1_000, 0)

        assert pool.earned("alice") == 1_000
        assert directory.pool_info(STK).total_rewards_amount == 1_000

    def test_flash_pool_streaming_funding(self, directory, clock):
        pool = directory.deploy(OWNER, STK, "flash")
        pool.stake("alice", 10)

        update = directory.add_rewards(OWNER, STK, 864_000, 1)

        assert update.reward_rate == 10 * pool.ledger.precision
        assert pool.period_finish == clock.now() + DAY
        assert pool.earned("alice") == 0

    def test_list_pools(self, directory):
        directory.deploy(OWNER, STK)
        directory.deploy(OWNER, "workers", "working")

        listed = [info.to_dict() for info in directory.list_pools()]

        assert [entry["key"] for entry in listed] == [STK, "workers"]
        assert listed[1]["pool_type"] == "working"


class TestRoles:
    """Test suite for ownership and rewarder management."""

    def test_transfer_ownership(self, directory, event_log):
        directory.transfer_ownership(OWNER, "new-owner")

        assert directory.owner == "new-owner"
        with pytest.raises(NotAuthorized):
            directory.deploy(OWNER, STK)
        directory.deploy("new-owner", STK)

        event = event_log.last(EventType.OWNERSHIP_TRANSFERRED)
        assert event.data == {"previous_owner": OWNER, "new_owner": "new-owner"}

    def test_transfer_ownership_requires_owner(self, directory):
        with pytest.raises(NotAuthorized):
            directory.transfer_ownership("mallory", "mallory")

    def test_add_rewarder(self, directory, vault, event_log):
        directory.deploy(OWNER, STK)
        vault.mint(RWD, "funder", 5_000)

        assert directory.add_rewarder(OWNER, "funder")
        assert not directory.add_rewarder(OWNER, "funder")
        directory.add_rewards("funder", STK, 5_000, 1)

        assert vault.balance_of(RWD, "funder") == 0
        assert event_log.last(EventType.REWARDER_ADDED).data["rewarder"] == "funder"

    def test_add_rewarder_requires_owner(self, directory):
        with pytest.raises(NotAuthorized):
            directory.add_rewarder("mallory", "mallory")

    def test_remove_rewarder(self, directory, event_log):
        directory.deploy(OWNER, STK)
        directory.add_rewarder(OWNER, "funder")

        assert directory.remove_rewarder(OWNER, "funder")
        assert not directory.remove_rewarder(OWNER, "funder")
        assert not directory.is_rewarder("funder")
        with pytest.raises(NotAuthorized):
            directory.add_rewards("funder", STK, 1_000, 1)
        assert event_log.last(EventType.REWARDER_REMOVED).data["rewarder"] == "funder"

    def test_old_owner_cannot_manage_rewarders(self, directory):
        directory.transfer_ownership(OWNER, "new-owner")
        with pytest.raises(NotAuthorized):
            directory.add_rewarder(OWNER, "funder")
        assert directory.add_rewarder("new-owner", "funder")
