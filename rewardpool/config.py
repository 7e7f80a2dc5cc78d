"""
Reward Pool Configuration System

Pydantic v2-based configuration with YAML/JSON support and environment overrides.

Features:
- Type-safe configuration models
- YAML/JSON file loading
- Environment variable overrides
- Validation with defaults

Author: BelizeChain AI Team
Date: October 2025
Python: 3.11+
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from loguru import logger

from .ledger.fixed_point import SECONDS_PER_DAY


# =============================================================================
# Ledger Configuration
# =============================================================================


class LedgerConfig(BaseModel):
    """Configuration for the accrual ledger."""

    precision_decimals: int = Field(
        default=18,
        ge=6,
        le=36,
        description="Decimal places of the fixed-point accumulator and reward rate",
    )

    duration_unit_seconds: int = Field(
        default=SECONDS_PER_DAY,
        ge=1,
        le=365 * SECONDS_PER_DAY,
        description="Seconds per reward duration unit (days by default)",
    )

    @property
    def precision(self) -> int:
        return 10 ** self.precision_decimals


# =============================================================================
# Working Pool Configuration
# =============================================================================


class WorkingPoolConfig(BaseModel):
    """Configuration for headcount-weighted (working) pools."""

    max_report_span_seconds: int = Field(
        default=3600,
        ge=1,
        le=30 * SECONDS_PER_DAY,
        description="Longest gap between liveness reports before a worker goes stale",
    )

    report_history_size: int = Field(
        default=1000,
        ge=0,
        le=1_000_000,
        description="Liveness reports kept per pool for auditing",
    )


# =============================================================================
# Event Configuration
# =============================================================================


class EventConfig(BaseModel):
    """Configuration for the audit event log."""

    max_history_size: int | None = Field(
        default=10_000,
        ge=1,
        description="Events kept in memory (None = unbounded)",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Configuration for loguru sinks."""

    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    rotation: str = Field(
        default="100 MB",
        description="Log rotation size/time",
    )

    retention: str = Field(
        default="30 days",
        description="Log retention period",
    )

    serialize: bool = Field(
        default=False,
        description="Emit JSON log records",
    )

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path | None) -> Path | None:
        """Expand user home in log paths."""
        if v is None or v == "":
            return None
        return Path(v).expanduser()


# =============================================================================
# Main Configuration
# =============================================================================


class RewardPoolConfig(BaseModel):
    """Main reward pool configuration."""

    project_name: str = Field(
        default="rewardpool",
        description="Project name",
    )

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment",
    )

    ledger: LedgerConfig = Field(
        default_factory=LedgerConfig,
        description="Ledger configuration",
    )

    working: WorkingPoolConfig = Field(
        default_factory=WorkingPoolConfig,
        description="Working pool configuration",
    )

    events: EventConfig = Field(
        default_factory=EventConfig,
        description="Event log configuration",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> RewardPoolConfig:
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML file

        Returns:
            RewardPoolConfig instance
        """
        import yaml

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        logger.info(f"Loaded configuration from {path}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str | Path) -> RewardPoolConfig:
        """
        Load configuration from JSON file.

        Args:
            path: Path to JSON file

        Returns:
            RewardPoolConfig instance
        """
        import json

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        logger.info(f"Loaded configuration from {path}")
        return cls(**data)

    @classmethod
    def from_env(cls, prefix: str = "REWARDPOOL_") -> RewardPoolConfig:
        """
        Load configuration from environment variables.

        Environment variables should be in the format:
        REWARDPOOL_LEDGER__DURATION_UNIT_SECONDS=3600
        REWARDPOOL_WORKING__MAX_REPORT_SPAN_SECONDS=7200

        Args:
            prefix: Environment variable prefix

        Returns:
            RewardPoolConfig instance
        """
        config_dict: dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue

            # Remove prefix and convert to nested dict
            key = key[len(prefix):].lower()
            parts = key.split("__")

            current = config_dict
            for part in parts[:-1]:
                current = current.setdefault(part, {})

            final_key = parts[-1]
            if value.lower() in ("true", "false"):
                current[final_key] = value.lower() == "true"
            elif value.isdigit():
                current[final_key] = int(value)
            else:
                current[final_key] = value

        logger.info(f"Loaded configuration from environment variables (prefix={prefix})")
        return cls(**config_dict)

    def to_yaml(self, path: str | Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Path to YAML file
        """
        import yaml

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

        logger.info(f"Saved configuration to {path}")

    def to_json(self, path: str | Path) -> None:
        """
        Save configuration to JSON file.

        Args:
            path: Path to JSON file
        """
        import json

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

        logger.info(f"Saved configuration to {path}")


# =============================================================================
# Configuration Factory
# =============================================================================


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "REWARDPOOL_",
) -> RewardPoolConfig:
    """
    Load configuration with automatic format detection.

    Priority:
    1. Explicit config file (YAML or JSON)
    2. Environment variables
    3. Defaults

    Args:
        config_path: Path to config file (YAML or JSON)
        env_prefix: Environment variable prefix

    Returns:
        RewardPoolConfig instance
    """
    if config_path:
        path = Path(config_path)
        if path.suffix in (".yaml", ".yml"):
            return RewardPoolConfig.from_yaml(path)
        elif path.suffix == ".json":
            return RewardPoolConfig.from_json(path)
        else:
            raise ValueError(f"Unknown config format: {path.suffix}")

    if any(key.startswith(env_prefix) for key in os.environ):
        logger.info("Using configuration from environment variables")
        return RewardPoolConfig.from_env(env_prefix)

    logger.info("Using default configuration")
    return RewardPoolConfig()


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "RewardPoolConfig",
    "LedgerConfig",
    "WorkingPoolConfig",
    "EventConfig",
    "LoggingConfig",
    "load_config",
]
