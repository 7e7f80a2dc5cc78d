"""
External collaborators of a reward pool: custody, authorization and time.
"""

from .clock import Clock, SystemClock, ManualClock
from .vault import NATIVE_TOKEN, TransferService, TransferRecord, TokenVault
from .access import AccessControl

__all__ = [
    "Clock",
    "SystemClock",
    "ManualClock",
    "NATIVE_TOKEN",
    "TransferService",
    "TransferRecord",
    "TokenVault",
    "AccessControl",
]
