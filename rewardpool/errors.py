"""
Error taxonomy for reward pools.

Every failure is raised synchronously to the immediate caller and aborts the
whole operation; pools restore their ledger state before re-raising.

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations


class RewardPoolError(Exception):
    """Base class for all reward pool failures."""


class PreconditionViolation(RewardPoolError, ValueError):
    """Invalid input or pool state (zero amount, bad duration, empty account)."""


class AlreadyRegistered(PreconditionViolation):
    """Participant is already active in a headcount pool."""


class NotRegistered(PreconditionViolation):
    """Participant is not active in a headcount pool."""


class AlreadyDeployed(PreconditionViolation):
    """A pool already exists for this directory key."""


class UnknownPool(PreconditionViolation):
    """No pool is deployed for this directory key."""


class InsufficientBalance(RewardPoolError):
    """Withdrawal or transfer exceeds the held amount."""


class NotAuthorized(RewardPoolError, PermissionError):
    """Caller lacks the owner or rewarder capability."""


class NotYetFinished(RewardPoolError):
    """Settlement attempted before the round has ended."""


class TransferFailed(RewardPoolError):
    """The value transfer service rejected a pull or push."""


__all__ = [
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
]
