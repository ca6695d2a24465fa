"""
itemsblocker/cli/blocks.py

Server-console commands.

Usage:
    itemsblocker block rifle.ak 2h all              Block for everyone, 2 hours
    itemsblocker block rifle.ak wipe                Block until the next wipe
    itemsblocker block metal.facemask 1d player 42  Block for one participant
    itemsblocker block metal.facemask player 42 1d  (same, alternate order)
    itemsblocker unblock rifle.ak all               Clear global + wipe blocks
    itemsblocker unblock metal.facemask player 42   Clear one participant
    itemsblocker list [--format json]               Show active blocks
    itemsblocker wipe                               Fire the reset signal
    itemsblocker check rifle.ak 42                  Exit 1 if blocked

Exit codes:
    0  Success / item allowed
    1  Item is blocked (check only)
    2  Rejected command (unknown item, bad duration, no rule, ...)
"""

import json
import sys
from typing import Tuple

import click

from itemsblocker.runtime.commands import CommandResult, render_block_list
from itemsblocker.runtime.context import RuntimeContext


def _runtime(ctx: click.Context) -> RuntimeContext:
    return ctx.find_object(RuntimeContext)


def _report(result: CommandResult) -> None:
    color = "green" if result.ok else "red"
    for line in result.messages:
        click.secho(line, fg=color, err=not result.ok)
    if not result.ok:
        sys.exit(2)


@click.command("block")
@click.argument("item")
@click.argument("args", nargs=-1)
@click.pass_context
def block_command(ctx: click.Context, item: str, args: Tuple[str, ...]) -> None:
    """
    Block ITEM.

    \b
    ARGS: [duration|wipe] [all|global|wipe|player <idOrName>]
      or: player <idOrName> [duration]
    """
    runtime = _runtime(ctx)
    _report(runtime.commands.handle_block_args(None, [item, *args]))


@click.command("unblock")
@click.argument("item")
@click.argument("scope", required=False, default="all")
@click.argument("participant", required=False)
@click.pass_context
def unblock_command(ctx: click.Context, item: str, scope: str, participant: str) -> None:
    """Clear blocks on ITEM for SCOPE (all | wipe | player PARTICIPANT)."""
    runtime = _runtime(ctx)
    _report(runtime.commands.clear_block(None, item, scope, participant))


@click.command("list")
@click.option(
    "--format", "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format.",
)
@click.pass_context
def list_command(ctx: click.Context, fmt: str) -> None:
    """Show every active block with its remaining time."""
    runtime = _runtime(ctx)
    summaries = runtime.commands.list_blocks()
    if fmt == "json":
        click.echo(json.dumps([s.to_dict() for s in summaries], indent=2))
        return
    for line in render_block_list(summaries):
        click.echo(line)


@click.command("wipe")
@click.pass_context
def wipe_command(ctx: click.Context) -> None:
    """Clear every wipe-scoped block, as a server wipe would."""
    runtime = _runtime(ctx)
    cleared = runtime.guard.on_new_save()
    click.secho(f"Wipe applied: cleared {cleared} wipe-global block(s).", fg="green")


@click.command("check")
@click.argument("item")
@click.argument("participant")
@click.pass_context
def check_command(ctx: click.Context, item: str, participant: str) -> None:
    """Report whether ITEM is blocked for PARTICIPANT."""
    runtime = _runtime(ctx)
    mutator = runtime.mutator

    item_id = mutator.catalog.resolve_item_id(item)
    participant_id = mutator.participants.resolve_participant_id(participant)
    if item_id is None or participant_id is None:
        click.secho(f"Cannot resolve {item if item_id is None else participant}", fg="red", err=True)
        sys.exit(2)

    if runtime.evaluator.is_blocked(item_id, participant_id):
        click.secho(f"{item_id}: BLOCKED for {participant_id}", fg="red")
        sys.exit(1)
    click.secho(f"{item_id}: allowed for {participant_id}", fg="green")
