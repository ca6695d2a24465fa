"""
Runtime context for an ItemsBlocker-enabled server.

Owns the single PolicyStore and wires it into every component that needs
it. Hosts call start() once when the plugin loads and stop() when it
unloads.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from itemsblocker.adapters.interfaces import Authorizer, ItemCatalog, ParticipantDirectory
from itemsblocker.adapters.static import (
    StaticItemCatalog,
    StaticParticipantDirectory,
    StaticPermissions,
)
from itemsblocker.core.time import Clock, utc_now
from itemsblocker.policy.evaluator import Evaluator
from itemsblocker.policy.mutator import Mutator
from itemsblocker.policy.wipe import WipeHandler
from itemsblocker.runtime.commands import CommandSurface
from itemsblocker.runtime.config import BlockerConfig, load_config
from itemsblocker.runtime.hooks import BlockGuard, Notifier
from itemsblocker.store.persistence import StateFile
from itemsblocker.store.store import PolicyStore

logger = logging.getLogger("itemsblocker.runtime")


@dataclass
class RuntimeContext:
    """Everything a host needs, built around one PolicyStore."""

    config: BlockerConfig
    store: PolicyStore
    evaluator: Evaluator
    mutator: Mutator
    wipe_handler: WipeHandler
    commands: CommandSurface
    guard: BlockGuard

    @classmethod
    def build(
        cls,
        config: BlockerConfig,
        catalog: ItemCatalog,
        participants: ParticipantDirectory,
        authorizer: Authorizer,
        notifier: Optional[Notifier] = None,
        clock: Clock = utc_now,
    ) -> "RuntimeContext":
        store = PolicyStore(state_file=StateFile(config.data_path), clock=clock)
        evaluator = Evaluator(store, clock=clock)
        mutator = Mutator(
            store,
            catalog,
            participants,
            clock=clock,
            default_duration=config.default_duration,
        )
        wipe_handler = WipeHandler(store)
        commands = CommandSurface(
            mutator,
            store,
            catalog,
            authorizer,
            clock=clock,
            admin_permission=config.admin_permission,
        )
        guard = BlockGuard(
            evaluator,
            wipe_handler,
            authorizer,
            catalog,
            notifier=notifier,
            notify_on_blocked_attempt=config.notify_on_blocked_attempt,
            bypass_permission=config.bypass_permission,
        )
        return cls(
            config=config,
            store=store,
            evaluator=evaluator,
            mutator=mutator,
            wipe_handler=wipe_handler,
            commands=commands,
            guard=guard,
        )

    @classmethod
    def from_config(
        cls,
        config_file: Path,
        notifier: Optional[Notifier] = None,
        clock: Clock = utc_now,
    ) -> "RuntimeContext":
        """Create a context using the static collaborators described in the config file."""
        config = load_config(config_file)

        items_path = config.items_path
        if items_path is not None:
            catalog = StaticItemCatalog.from_yaml(
                items_path,
                allow_display_name_match=config.allow_display_name_match,
            )
        else:
            catalog = StaticItemCatalog(
                allow_display_name_match=config.allow_display_name_match,
                accept_unknown=True,
            )

        return cls.build(
            config,
            catalog=catalog,
            participants=StaticParticipantDirectory(config.participants),
            authorizer=StaticPermissions(config.permissions),
            notifier=notifier,
            clock=clock,
        )

    def start(self) -> None:
        """Load persisted rules, drop whatever expired while offline, save."""
        self.store.load()
        removed = self.store.prune()
        self.store.save()
        logger.info(f"ItemsBlocker started: {len(self.store)} active rule(s), {removed} expired")

    def stop(self) -> None:
        self.store.save()

    def __repr__(self) -> str:
        return (
            f"RuntimeContext("
            f"data_file={str(self.config.data_path)!r}, "
            f"rules={len(self.store)})"
        )
