"""
ItemsBlocker Runtime - host integration.

This module is what a game-server bridge talks to: the hooks called on
every equip/wear/reload, the command surface for admins, and the context
that owns the store for the lifetime of the plugin.
"""

from itemsblocker.runtime.commands import BlockSummary, CommandResult, CommandSurface, ScopeSummary
from itemsblocker.runtime.config import BlockerConfig, load_config
from itemsblocker.runtime.context import RuntimeContext
from itemsblocker.runtime.hooks import BlockGuard

__all__ = [
    "BlockGuard",
    "BlockSummary",
    "BlockerConfig",
    "CommandResult",
    "CommandSurface",
    "RuntimeContext",
    "ScopeSummary",
    "load_config",
]
