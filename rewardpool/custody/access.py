"""
Owner / rewarder capability checks.
"""

from __future__ import annotations

from loguru import logger

from ..errors import NotAuthorized, PreconditionViolation


class AccessControl:
    """
    Single owner plus a set of rewarders.

    The initial owner is also the first rewarder. Ownership and the rewarder
    set can only be changed by the current owner.
    """

    def __init__(self, owner: str):
        if not owner:
            raise PreconditionViolation("owner must be a non-empty account")
        self.owner = owner
        self.rewarders: set[str] = {owner}

    def is_owner(self, account: str) -> bool:
        return account == self.owner

    def is_rewarder(self, account: str) -> bool:
        return account in self.rewarders

    def require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            raise NotAuthorized(f"caller is not the owner: {caller}")

    def require_rewarder(self, caller: str) -> None:
        if not self.is_rewarder(caller):
            raise NotAuthorized(f"not a rewarder: {caller}")

    def transfer_ownership(self, caller: str, new_owner: str) -> str:
        self.require_owner(caller)
        if not new_owner:
            raise PreconditionViolation("new owner must be a non-empty account")
        previous, self.owner = self.owner, new_owner
        logger.info("Ownership transferred", previous=previous, owner=new_owner)
        return previous

    def add_rewarder(self, caller: str, account: str) -> bool:
        """Returns False if ``account`` already was a rewarder."""
        self.require_owner(caller)
        if not account:
            raise PreconditionViolation("rewarder must be a non-empty account")
        if account in self.rewarders:
            return False
        self.rewarders.add(account)
        logger.info("Rewarder added", account=account)
        return True

    def remove_rewarder(self, caller: str, account: str) -> bool:
        """Returns False if ``account`` was not a rewarder."""
        self.require_owner(caller)
        if account not in self.rewarders:
            return False
        self.rewarders.discard(account)
        logger.info("Rewarder removed", account=account)
        return True


__all__ = ["AccessControl"]
