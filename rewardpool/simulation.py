"""
Scenario Replay

Replays a scripted sequence of timed pool actions against an in-memory vault
and a manual clock. Used by the ``rewardpool simulate`` command and handy for
checking reward schedules before funding a live pool.

Scenario format (YAML or JSON):

    pool: staking            # staking | flash | working
    owner: owner
    reward_token: RWD
    staking_token: STK
    start: 0
    balances:
      RWD: {owner: 1000000}
      STK: {alice: 9000, bob: 1000}
    steps:
      - {action: stake, participant: alice, amount: 9000}
      - {action: stake, participant: bob, amount: 1000}
      - {action: notify_reward, caller: owner, amount: 1000000, duration: 1}
      - {advance: 86400}
      - {action: get_reward, participant: alice}

Each step may move the clock (``advance`` seconds, or ``at`` seconds after
``start``) and then run one ``action``. A step with ``expect_error`` set to an
error class name must fail with that error.

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from . import errors
from .config import RewardPoolConfig
from .custody.clock import ManualClock
from .custody.vault import TokenVault
from .errors import PreconditionViolation, RewardPoolError
from .events import EventLog
from .ledger.scheduler import Distribution, RoundUpdate
from .pools.base import RewardPool
from .pools.directory import PoolDirectory
from .pools.flash import FlashStakingPool
from .pools.staking import StakingPool
from .pools.working import WorkingPool


ACTIONS = (
    "stake",
    "withdraw",
    "get_reward",
    "exit",
    "notify_reward",
    "add_rewards",
    "register",
    "report",
    "claim_rewards",
    "settlement_sweep",
)


@dataclass
class StepResult:
    """Outcome of one scenario step."""

    index: int
    time: int
    action: str | None
    result: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "time": self.time,
            "action": self.action,
            "result": self.result,
            "error": self.error,
        }


@dataclass
class ScenarioResult:
    """Final state of a replayed scenario."""

    pool: RewardPool
    vault: TokenVault
    clock: ManualClock
    events: EventLog
    participants: list[str]
    steps: list[StepResult] = field(default_factory=list)

    def earned(self) -> dict[str, int]:
        return {p: self.pool.earned(p) for p in self.participants}

    def balances(self, token: str | None = None) -> dict[str, int]:
        token = token or self.pool.reward_token
        return {p: self.vault.balance_of(token, p) for p in self.participants}

    def summary(self) -> dict[str, Any]:
        return {
            "pool_type": self.pool.pool_type,
            "time": self.clock.now(),
            "reward_balances": self.balances(),
            "earned": self.earned(),
            "undistributed_reward": self.pool.undistributed_reward,
            "total_reward_notified": self.pool.total_reward_notified,
            "total_reward_paid": self.pool.total_reward_paid,
            "total_swept": self.pool.total_swept,
            "events": len(self.events.history),
        }

    def to_dict(self) -> dict[str, Any]:
        data = self.summary()
        data["steps"] = [step.to_dict() for step in self.steps]
        return data


def load_scenario(path: str | Path) -> dict[str, Any]:
    """Load a scenario from a YAML or JSON file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")

    with open(path, "r") as f:
        if path.suffix in (".yaml", ".yml"):
            import yaml

            data = yaml.safe_load(f) or {}
        elif path.suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unknown scenario format: {path.suffix}")

    logger.info(f"Loaded scenario from {path}", steps=len(data.get("steps", [])))
    return data


def _participants(steps: list[dict[str, Any]]) -> list[str]:
    seen: dict[str, None] = {}
    for step in steps:
        for key in ("participant", "collector"):
            if step.get(key):
                seen.setdefault(step[key], None)
    return list(seen)


def _error_class(name: str) -> type[RewardPoolError]:
    error = getattr(errors, name, None)
    if not (isinstance(error, type) and issubclass(error, RewardPoolError)):
        raise PreconditionViolation(f"unknown error in expect_error: {name}")
    return error


def _run_action(directory: PoolDirectory, key: str, pool: RewardPool, step: dict[str, Any]) -> Any:
    action = step["action"]
    participant = step.get("participant")

    if action == "notify_reward":
        update = directory.add_rewards(
            step.get("caller", directory.owner), key, step["amount"], step.get("duration", 1)
        )
        if isinstance(update, RoundUpdate):
            return update.reward_rate // pool.ledger.precision
        if isinstance(update, Distribution):
            return update.amount
        return None
    if action == "add_rewards":
        if not isinstance(pool, FlashStakingPool):
            raise PreconditionViolation("add_rewards requires a flash pool")
        directory.add_rewards(step.get("caller", directory.owner), key, step["amount"], 0)
        return step["amount"]
    if action == "settlement_sweep":
        return pool.settlement_sweep(step.get("collector", directory.owner))
    if action in ("get_reward", "claim_rewards"):
        return pool.get_reward(participant)

    if isinstance(pool, StakingPool):
        if action == "stake":
            return pool.stake(participant, step["amount"])
        if action == "withdraw":
            return pool.withdraw(participant, step["amount"])
        if action == "exit":
            return list(pool.exit(participant))
    elif isinstance(pool, WorkingPool):
        if action == "register":
            return pool.register(participant)
        if action == "report":
            return pool.submit_liveness_report(participant, step.get("compliant", True)).to_dict()
        if action == "exit":
            result = pool.exit(participant)
            return {"credited": result.credited, "forfeited": result.forfeited}

    raise PreconditionViolation(f"action {action!r} is not supported by {pool.pool_type} pools")


def run_scenario(
    scenario: dict[str, Any],
    config: RewardPoolConfig | None = None,
) -> ScenarioResult:
    """
    Replay ``scenario`` and return the final state.

    Args:
        scenario: Scenario mapping (see module docstring)
        config: Configuration for the directory and pools

    Returns:
        ScenarioResult

    Raises:
        RewardPoolError: If a step fails without a matching ``expect_error``
    """
    config = config or RewardPoolConfig()
    pool_type = scenario.get("pool", "staking")
    owner = scenario.get("owner", "owner")
    reward_token = scenario.get("reward_token", "RWD")
    key = scenario.get("staking_token", "STK" if pool_type != "working" else "workers")
    steps = scenario.get("steps", [])

    start = int(scenario.get("start", 0))
    clock = ManualClock(start)
    vault = TokenVault()
    events = EventLog(config.events.max_history_size)

    for token, holders in (scenario.get("balances") or {}).items():
        for account, amount in holders.items():
            vault.mint(token, account, amount)

    directory = PoolDirectory(owner, reward_token, vault, clock, config=config, events=events)
    pool = directory.deploy(owner, key, pool_type)
    result = ScenarioResult(
        pool=pool,
        vault=vault,
        clock=clock,
        events=events,
        participants=_participants(steps),
    )

    logger.info("Running scenario", pool_type=pool_type, steps=len(steps))

    for index, step in enumerate(steps):
        if "at" in step:
            clock.set(start + int(step["at"]))
        if "advance" in step:
            clock.advance(int(step["advance"]))

        action = step.get("action")
        outcome = StepResult(index=index, time=clock.now(), action=action)
        result.steps.append(outcome)
        if action is None:
            continue
        if action not in ACTIONS:
            raise PreconditionViolation(f"unknown scenario action: {action}")

        expected = step.get("expect_error")
        expected_error = _error_class(expected) if expected else None
        try:
            outcome.result = _run_action(directory, key, pool, step)
        except RewardPoolError as e:
            if expected_error and isinstance(e, expected_error):
                outcome.error = type(e).__name__
                continue
            raise
        if expected:
            raise PreconditionViolation(
                f"step {index} ({action}) was expected to fail with {expected}"
            )

    logger.success(
        "Scenario complete",
        undistributed=pool.undistributed_reward,
        events=len(events.history),
    )
    return result


__all__ = [
    "ACTIONS",
    "StepResult",
    "ScenarioResult",
    "load_scenario",
    "run_scenario",
]
