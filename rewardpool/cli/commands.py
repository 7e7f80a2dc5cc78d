"""
CLI Commands for rewardpool.

Provides command-line interface using Click framework.

Author: BelizeChain Team
License: MIT
"""

from typing import Optional
from pathlib import Path
import json
import sys

import click
from loguru import logger

from rewardpool import __version__


def _load_config(ctx):
    from rewardpool.config import load_config

    return load_config(ctx.obj.get("config"))


# Main CLI group
@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """
    rewardpool - Reward accrual for staking and worker pools.

    Replay reward schedules and manage configuration.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose

    # Configure logging
    from rewardpool.monitoring import configure_logging

    configure_logging(log_level="DEBUG" if verbose else "WARNING")


# Simulation command
@cli.command()
@click.argument("scenario", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
@click.option("--decimals", type=int, default=0, help="Token decimals for display")
@click.pass_context
def simulate(ctx, scenario: str, as_json: bool, decimals: int):
    """Replay a YAML/JSON scenario against an in-memory pool."""
    logger.info(f"Simulating scenario: {scenario}")

    try:
        from rewardpool.ledger import format_amount
        from rewardpool.simulation import load_scenario, run_scenario

        config = _load_config(ctx)
        result = run_scenario(load_scenario(Path(scenario)), config=config)

    except Exception as e:
        logger.error(f"Simulation failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
        return

    places = min(decimals, 6)
    summary = result.summary()
    click.echo(f"Pool type:        {summary['pool_type']}")
    click.echo(f"Final time:       {summary['time']}")
    click.echo(f"Reward notified:  {format_amount(summary['total_reward_notified'], decimals=decimals, places=places)}")
    click.echo(f"Reward paid:      {format_amount(summary['total_reward_paid'], decimals=decimals, places=places)}")
    click.echo(f"Undistributed:    {format_amount(summary['undistributed_reward'], decimals=decimals, places=places)}")
    click.echo(f"Swept:            {format_amount(summary['total_swept'], decimals=decimals, places=places)}")
    click.echo("")
    click.echo(f"{'participant':<20} {'balance':>20} {'earned':>20}")
    for participant in result.participants:
        balance = summary["reward_balances"][participant]
        earned = summary["earned"][participant]
        click.echo(
            f"{participant:<20} "
            f"{format_amount(balance, decimals=decimals, places=places):>20} "
            f"{format_amount(earned, decimals=decimals, places=places):>20}"
        )


# Config commands
@cli.group()
def config():
    """Manage configuration files."""


@config.command(name="show")
@click.option("--format", "fmt", default="yaml", type=click.Choice(["yaml", "json"]))
@click.pass_context
def config_show(ctx, fmt: str):
    """Show the effective configuration."""
    try:
        loaded = _load_config(ctx)
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    data = loaded.model_dump(mode="json")
    if fmt == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        import yaml

        click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False))


@config.command(name="init")
@click.argument("path", type=click.Path())
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_init(path: str, force: bool):
    """Write the default configuration to PATH (.yaml, .yml or .json)."""
    from rewardpool.config import RewardPoolConfig

    target = Path(path)
    if target.exists() and not force:
        click.echo(f"Error: {target} already exists (use --force)", err=True)
        sys.exit(1)

    defaults = RewardPoolConfig()
    if target.suffix in (".yaml", ".yml"):
        defaults.to_yaml(target)
    elif target.suffix == ".json":
        defaults.to_json(target)
    else:
        click.echo(f"Error: unknown config format: {target.suffix}", err=True)
        sys.exit(1)

    logger.success(f"Config created: {target}")
    click.echo(f"Config created: {target}")


if __name__ == "__main__":
    cli()
