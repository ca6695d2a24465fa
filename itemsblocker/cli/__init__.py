"""
itemsblocker/cli/__init__.py

ItemsBlocker CLI — root Click command group.

This file is the sole entry point for the `itemsblocker` terminal command.
It is registered in pyproject.toml as:

    [project.scripts]
    itemsblocker = "itemsblocker.cli:cli"

The CLI acts as the server console: it is always authorized, loads the
state file on start, and saves it on exit.

Adding a new command:
    1. Add a @click.command() to itemsblocker/cli/blocks.py (or a new module)
    2. cli.add_command(your_command) below
"""

import logging

import click

from itemsblocker.cli.blocks import (
    block_command,
    check_command,
    list_command,
    unblock_command,
    wipe_command,
)
from itemsblocker.runtime.context import RuntimeContext


@click.group()
@click.version_option(package_name="itemsblocker")
@click.option(
    "--config", "config_file",
    type=click.Path(dir_okay=False),
    default="itemsblocker.yaml",
    show_default=True,
    envvar="ITEMSBLOCKER_CONFIG",
    help="YAML config file (created with defaults if missing).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.pass_context
def cli(ctx: click.Context, config_file: str, log_level: str) -> None:
    """
    ItemsBlocker: block items per player, globally, or for a whole wipe.

    \b
    Quick start:
      itemsblocker block rifle.ak 2h all
      itemsblocker block rifle.ak wipe
      itemsblocker block metal.facemask 1d player 42
      itemsblocker unblock rifle.ak all
      itemsblocker list --format json
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    runtime = RuntimeContext.from_config(config_file)
    runtime.start()
    ctx.obj = runtime
    ctx.call_on_close(runtime.stop)


cli.add_command(block_command)
cli.add_command(unblock_command)
cli.add_command(list_command)
cli.add_command(wipe_command)
cli.add_command(check_command)
