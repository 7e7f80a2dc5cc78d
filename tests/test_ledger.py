"""
Tests for the reward accrual core.

Tests the accumulator flush, participant checkpoints, round scheduling with
rate blending, instant distribution, weight policies and settlement.

Author: BelizeChain Team
License: MIT
"""

import pytest

from rewardpool.errors import (
    InsufficientBalance,
    NotYetFinished,
    PreconditionViolation,
)
from rewardpool.ledger import (
    PRECISION,
    Checkpoint,
    HeadcountWeight,
    ParticipantRecord,
    RewardLedger,
    StakeWeight,
    distribute_now,
    effective_time,
    ensure_finished,
    format_amount,
    mul_div,
    schedule_round,
    sweep_undistributed,
    to_units,
)


HOUR = 3600
DAY = 86400


def join(ledger, participant, amount):
    """Checkpoint then add weight, as every pool mutator does."""
    ledger.update(participant)
    return ledger.increase_weight(participant, amount)


class TestFixedPoint:
    """Test suite for fixed-point helpers."""

    def test_effective_time_caps_at_round_end(self):
        assert effective_time(100, 50) == 50
        assert effective_time(40, 50) == 40

    def test_mul_div_floors(self):
        assert mul_div(10, 10, 3) == 33

    def test_mul_div_rejects_zero_denominator(self):
        with pytest.raises(PreconditionViolation):
            mul_div(1, 1, 0)

    def test_units(self):
        assert to_units(5) == 5 * 10 ** 18
        assert format_amount(to_units(1234), "RWD", places=2) == "1,234.00 RWD"


class TestAccumulator:
    """Test suite for RewardLedger.flush and projections."""

    def test_flush_is_idempotent(self, ledger, clock):
        """Two flushes at the same instant leave the same state."""
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)
        clock.advance(1000)

        ledger.flush()
        first = (ledger.accumulator, ledger.last_update_time, ledger.undistributed_reward)
        ledger.flush()
        second = (ledger.accumulator, ledger.last_update_time, ledger.undistributed_reward)

        assert first == second
        assert ledger.last_update_time == clock.now()

    def test_accumulator_growth(self, ledger, clock):
        """10 units/s over weight 100 for 1000s adds 100 per weight unit."""
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)
        clock.advance(1000)

        assert ledger.reward_per_token() == 100 * PRECISION
        assert ledger.earned("alice") == 10_000

    def test_projection_does_not_mutate(self, ledger, clock):
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)
        clock.advance(500)

        before = ledger.accumulator
        ledger.reward_per_token()
        ledger.earned("alice")
        assert ledger.accumulator == before

    def test_accrual_stops_at_round_end(self, ledger, clock):
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)

        clock.advance(DAY)
        at_end = ledger.reward_per_token()
        clock.advance(DAY)

        assert ledger.reward_per_token() == at_end
        assert ledger.earned("alice") == 864_000
        ledger.flush()
        assert ledger.last_update_time == ledger.round_end

    def test_monotonic_between_flushes(self, ledger, clock):
        """Accumulator and undistributed never decrease across flushes."""
        schedule_round(ledger, 864_000, DAY)
        previous = (ledger.accumulator, ledger.undistributed_reward)

        for step in range(6):
            clock.advance(HOUR)
            if step == 2:
                join(ledger, "alice", 7)
            if step == 4:
                ledger.update("alice")
                ledger.decrease_weight("alice", 7)
            ledger.flush()
            current = (ledger.accumulator, ledger.undistributed_reward)
            assert current[0] >= previous[0]
            assert current[1] >= previous[1]
            previous = current

    def test_empty_pool_emission_is_undistributed(self, ledger, clock):
        schedule_round(ledger, DAY, DAY)
        clock.advance(DAY // 2)

        ledger.flush()
        assert ledger.accumulator == 0
        assert ledger.undistributed_reward == DAY // 2


class TestCheckpoint:
    """Test suite for participant checkpoints."""

    def test_no_retroactive_earning(self, ledger, clock):
        """A late joiner earns nothing from before it joined."""
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)
        clock.advance(DAY // 2)

        join(ledger, "bob", 100)
        assert ledger.earned("bob") == 0

        clock.advance(DAY // 2)
        assert ledger.earned("alice") == 432_000 + 216_000
        assert ledger.earned("bob") == 216_000

    def test_checkpoint_settles_pending(self, ledger, clock):
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)
        clock.advance(1000)

        result = ledger.update("alice")

        assert result == Checkpoint(credited=10_000)
        record = ledger.record("alice")
        assert record.settled_unclaimed == 10_000
        assert record.accumulator_paid == ledger.accumulator
        assert record.last_checkpoint_time == clock.now()

    def test_weight_change_requires_checkpoint(self, ledger, clock):
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)
        clock.advance(1000)

        with pytest.raises(RuntimeError):
            ledger.increase_weight("alice", 1)

    def test_decrease_more_than_held(self, ledger):
        join(ledger, "alice", 100)
        with pytest.raises(InsufficientBalance):
            ledger.decrease_weight("alice", 101)
        with pytest.raises(InsufficientBalance):
            ledger.decrease_weight("bob", 1)

    def test_non_positive_weight_change(self, ledger):
        with pytest.raises(PreconditionViolation):
            join(ledger, "alice", 0)

    def test_record_pruned_when_empty(self, ledger, clock):
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)
        clock.advance(10)

        ledger.update("alice")
        ledger.decrease_weight("alice", 100)
        assert ledger.record("alice") is not None  # unclaimed rewards remain

        assert ledger.take_settled("alice") == 100
        assert ledger.record("alice") is None
        assert ledger.total_weight == 0

    def test_snapshot_restore(self, ledger, clock):
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)
        clock.advance(100)

        snapshot = ledger.snapshot("alice", "bob")
        join(ledger, "bob", 50)
        ledger.update("alice")
        ledger.decrease_weight("alice", 40)

        ledger.restore(snapshot)

        assert ledger.total_weight == 100
        assert ledger.weight_of("alice") == 100
        assert ledger.record("bob") is None
        assert ledger.last_update_time == snapshot.last_update_time


class TestRoundScheduler:
    """Test suite for schedule_round and distribute_now."""

    def test_zero_amount_is_noop(self, ledger):
        assert schedule_round(ledger, 0, DAY) is None
        assert ledger.round_end == 0
        assert ledger.total_reward_notified == 0

    def test_zero_amount_checked_before_duration(self, ledger):
        assert schedule_round(ledger, 0, 0) is None

    def test_invalid_duration(self, ledger):
        with pytest.raises(PreconditionViolation):
            schedule_round(ledger, 100, 0)

    def test_negative_amount(self, ledger):
        with pytest.raises(PreconditionViolation):
            schedule_round(ledger, -1, DAY)

    def test_first_round(self, ledger, clock):
        update = schedule_round(ledger, 864_000, DAY)

        assert update.leftover == 0
        assert ledger.reward_rate == 10 * PRECISION
        assert ledger.round_start == clock.now()
        assert ledger.round_end == clock.now() + DAY
        assert ledger.total_reward_notified == 864_000

    def test_rate_blending_mid_round(self, ledger, clock):
        """New rate is (leftover + amount) / duration."""
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)
        r1 = ledger.reward_rate
        clock.advance(DAY // 2)

        update = schedule_round(ledger, 864_000, DAY)

        assert update.leftover == 432_000
        assert ledger.reward_rate == (864_000 * PRECISION + r1 * (DAY // 2)) // DAY
        assert ledger.reward_rate == 15 * PRECISION
        assert ledger.round_end == clock.now() + DAY

        clock.advance(DAY)
        assert ledger.earned("alice") == 864_000 * 2

    def test_top_up_keeps_round_start(self, ledger, clock):
        schedule_round(ledger, 864_000, DAY)
        started = clock.now()
        clock.advance(DAY // 2)

        update = schedule_round(ledger, 864_000, DAY)

        assert update.round_start == started
        assert ledger.round_start == started

    def test_new_round_after_end(self, ledger, clock):
        join(ledger, "alice", 100)
        schedule_round(ledger, 864_000, DAY)
        clock.advance(2 * DAY)

        update = schedule_round(ledger, 864_000, 2 * DAY)

        assert update.leftover == 0
        assert update.round_start == clock.now()
        assert ledger.reward_rate == 5 * PRECISION
        clock.advance(DAY)
        assert ledger.earned("alice") == 864_000 + 432_000

    def test_notified_flag(self, ledger):
        schedule_round(ledger, 1_000, DAY, notified=False)
        assert ledger.total_reward_notified == 0

    def test_distribute_now(self, ledger):
        join(ledger, "alice", 1)
        join(ledger, "bob", 3)

        result = distribute_now(ledger, 1_000)

        assert result.accumulator_delta == 250 * PRECISION
        assert ledger.earned("alice") == 250
        assert ledger.earned("bob") == 750
        assert ledger.total_reward_notified == 1_000

    def test_distribute_now_empty_pool(self, ledger):
        result = distribute_now(ledger, 500)

        assert result.undistributed == 500
        assert ledger.undistributed_reward == 500
        assert distribute_now(ledger, 0) is None


class TestWeightPolicies:
    """Test suite for stake and headcount weight policies."""

    def test_stake_weight_credits_everything(self):
        result = StakeWeight().split(ParticipantRecord(weight=5), 123, 0, 10)
        assert result == Checkpoint(credited=123)

    def test_headcount_fresh_window(self):
        policy = HeadcountWeight(HOUR)
        record = ParticipantRecord(weight=1, last_activity_time=0)
        assert policy.split(record, 900, 0, HOUR) == Checkpoint(credited=900)

    def test_headcount_partial_staleness(self):
        """1.5h window with 1h of freshness credits two thirds."""
        policy = HeadcountWeight(HOUR)
        record = ParticipantRecord(weight=1, last_activity_time=0)

        result = policy.split(record, 900, 0, HOUR + HOUR // 2)

        assert result == Checkpoint(credited=600, forfeited=300)
        assert result.pending == 900

    def test_headcount_fully_stale(self):
        policy = HeadcountWeight(HOUR)
        record = ParticipantRecord(weight=1, last_activity_time=0)

        result = policy.split(record, 900, 2 * HOUR, 3 * HOUR)

        assert result == Checkpoint(credited=0, forfeited=900)

    def test_headcount_empty_window(self):
        policy = HeadcountWeight(HOUR)
        record = ParticipantRecord(weight=1, last_activity_time=0)
        assert policy.split(record, 10, 5 * HOUR, 5 * HOUR) == Checkpoint(credited=10)

    def test_headcount_in_window(self):
        policy = HeadcountWeight(HOUR)
        record = ParticipantRecord(weight=1, last_activity_time=100)

        assert policy.in_window(record, 100 + HOUR)
        assert not policy.in_window(record, 101 + HOUR)
        assert policy.fresh_until(record) == 100 + HOUR

    def test_invalid_span(self):
        with pytest.raises(PreconditionViolation):
            HeadcountWeight(0)

    def test_headcount_ledger_forfeits_to_undistributed(self, clock):
        ledger = RewardLedger(clock, HeadcountWeight(HOUR))
        ledger.update("w1")
        ledger.increase_weight("w1", 1)
        ledger.record("w1").last_activity_time = clock.now()
        schedule_round(ledger, DAY, DAY)

        clock.advance(2 * HOUR)
        result = ledger.update("w1", enforce_liveness=True)

        assert result == Checkpoint(credited=HOUR, forfeited=HOUR)
        assert ledger.undistributed_reward == HOUR
        assert ledger.record("w1").settled_unclaimed == HOUR

    def test_plain_checkpoint_credits_stale_accrual(self, clock):
        ledger = RewardLedger(clock, HeadcountWeight(HOUR))
        ledger.update("w1")
        ledger.increase_weight("w1", 1)
        ledger.record("w1").last_activity_time = clock.now()
        schedule_round(ledger, DAY, DAY)

        clock.advance(2 * HOUR)
        assert ledger.earned("w1") == 2 * HOUR
        assert ledger.update("w1") == Checkpoint(credited=2 * HOUR)
        assert ledger.undistributed_reward == 0


class TestSettlement:
    """Test suite for the settlement sweep."""

    def test_not_started(self, ledger):
        with pytest.raises(NotYetFinished):
            ensure_finished(ledger)

    def test_round_running(self, ledger, clock):
        schedule_round(ledger, DAY, DAY)
        clock.advance(DAY)
        with pytest.raises(NotYetFinished):
            sweep_undistributed(ledger)

    def test_sweep_after_end(self, ledger, clock):
        schedule_round(ledger, DAY, DAY)
        clock.advance(DAY + 1)

        assert sweep_undistributed(ledger) == DAY
        assert ledger.undistributed_reward == 0
        assert sweep_undistributed(ledger) == 0
