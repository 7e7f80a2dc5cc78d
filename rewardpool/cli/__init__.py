"""
Command Line Interface for rewardpool.

Commands:
- rewardpool simulate: Replay a reward scenario
- rewardpool config show: Print the effective configuration
- rewardpool config init: Write a default configuration file

Author: BelizeChain Team
License: MIT
"""

from .commands import cli

__all__ = ["cli"]
