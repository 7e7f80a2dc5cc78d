"""
Token custody.

Pools move value only through a :class:`TransferService`. ``TokenVault`` is
the in-memory reference implementation: a multi-token balance book whose
pulls and pushes either complete fully or raise :class:`TransferFailed`
without changing any balance.

Author: BelizeChain Team
License: MIT
"""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from ..errors import PreconditionViolation, TransferFailed


# Pseudo-address used for the chain's native coin
NATIVE_TOKEN = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"


class TransferService(Protocol):
    """Atomic value transfer between an account and a pool."""

    def pull(self, token: str, source: str, destination: str, amount: int) -> None:
        """Move ``amount`` of ``token`` from ``source`` into ``destination``."""
        ...

    def push(self, token: str, source: str, destination: str, amount: int) -> None:
        """Move ``amount`` of ``token`` from ``source`` out to ``destination``."""
        ...

    def balance_of(self, token: str, account: str) -> int:
        ...


@dataclass(frozen=True)
class TransferRecord:
    """A completed transfer, kept for auditing."""

    token: str
    source: str
    destination: str
    amount: int


class TokenVault:
    """
    In-memory multi-token balance book.

    Usage:
        vault = TokenVault()
        vault.mint("RWD", "alice", 1_000)
        vault.pull("RWD", "alice", "pool-1", 400)
        vault.balance_of("RWD", "pool-1")  # 400
    """

    def __init__(self):
        self._balances: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._lock = threading.Lock()
        self.history: list[TransferRecord] = []

    def balance_of(self, token: str, account: str) -> int:
        return self._balances[token][account]

    def total_supply(self, token: str) -> int:
        return sum(self._balances[token].values())

    def mint(self, token: str, account: str, amount: int) -> None:
        if amount <= 0:
            raise PreconditionViolation(f"mint amount must be positive, got {amount}")
        with self._lock:
            self._balances[token][account] += amount
        logger.debug("Minted tokens", token=token, account=account, amount=amount)

    def transfer(self, token: str, source: str, destination: str, amount: int) -> None:
        if not source or not destination:
            raise TransferFailed("transfer requires both a source and a destination")
        if amount <= 0:
            raise TransferFailed(f"transfer amount must be positive, got {amount}")

        with self._lock:
            held = self._balances[token][source]
            if held < amount:
                raise TransferFailed(
                    f"{source} holds {held} {token}, cannot transfer {amount}"
                )
            self._balances[token][source] = held - amount
            self._balances[token][destination] += amount
            self.history.append(TransferRecord(token, source, destination, amount))

    def pull(self, token: str, source: str, destination: str, amount: int) -> None:
        self.transfer(token, source, destination, amount)

    def push(self, token: str, source: str, destination: str, amount: int) -> None:
        self.transfer(token, source, destination, amount)


__all__ = ["NATIVE_TOKEN", "TransferService", "TransferRecord", "TokenVault"]
