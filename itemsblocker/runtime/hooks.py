"""
Host hooks: where gameplay actions meet the evaluator.

Each hook returns True when the action may proceed and False when it is
blocked. Hooks never raise into the host: if evaluation fails for any
reason the action is allowed and the failure is logged.

Bypassed (never blocked):
- unknown actor (None) or actor id <= 0
- NPCs
- actors holding the bypass permission
"""

import functools
import logging
from typing import Callable, Optional

from itemsblocker.adapters.interfaces import Authorizer, ItemCatalog
from itemsblocker.policy.evaluator import Evaluator
from itemsblocker.policy.wipe import WipeHandler
from itemsblocker.runtime.config import PERM_BYPASS

logger = logging.getLogger("itemsblocker.hooks")

Notifier = Callable[[int, str], None]


def _fail_open(hook: Callable) -> Callable:
    @functools.wraps(hook)
    def wrapped(self, *args, **kwargs):
        try:
            return hook(self, *args, **kwargs)
        except Exception:
            logger.exception(f"{hook.__name__} failed; allowing action")
            return True
    return wrapped


class BlockGuard:
    """
    Equip / wear / reload checks plus the wipe signal.

    `notifier(participant_id, item_label)` is called when an action is
    refused and notifications are enabled.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        wipe_handler: WipeHandler,
        authorizer: Authorizer,
        catalog: ItemCatalog,
        notifier: Optional[Notifier] = None,
        notify_on_blocked_attempt: bool = True,
        bypass_permission: str = PERM_BYPASS,
    ):
        self.evaluator = evaluator
        self.wipe_handler = wipe_handler
        self.authorizer = authorizer
        self.catalog = catalog
        self.notifier = notifier
        self.notify_on_blocked_attempt = notify_on_blocked_attempt
        self.bypass_permission = bypass_permission

    def should_bypass(self, actor_id: Optional[int], is_npc: bool = False) -> bool:
        if actor_id is None or actor_id <= 0 or is_npc:
            return True
        return self.authorizer.has_permission(actor_id, self.bypass_permission)

    def _check(
        self,
        actor_id: Optional[int],
        item_id: Optional[str],
        is_npc: bool,
        label: Optional[str],
    ) -> bool:
        if not item_id or self.should_bypass(actor_id, is_npc):
            return True

        if not self.evaluator.is_blocked(item_id, actor_id):
            return True

        if self.notify_on_blocked_attempt and self.notifier is not None:
            self.notifier(actor_id, label or self.catalog.display_name(item_id))
        return False

    @_fail_open
    def can_equip_item(
        self,
        actor_id: Optional[int],
        item_id: Optional[str],
        is_npc: bool = False,
        label: Optional[str] = None,
    ) -> bool:
        return self._check(actor_id, item_id, is_npc, label)

    @_fail_open
    def can_wear_item(
        self,
        actor_id: Optional[int],
        item_id: Optional[str],
        is_npc: bool = False,
        label: Optional[str] = None,
    ) -> bool:
        return self._check(actor_id, item_id, is_npc, label)

    @_fail_open
    def can_reload_magazine(
        self,
        actor_id: Optional[int],
        ammo_item_id: Optional[str],
        is_npc: bool = False,
        label: Optional[str] = None,
    ) -> bool:
        return self._check(actor_id, ammo_item_id, is_npc, label)

    def on_new_save(self) -> int:
        try:
            return self.wipe_handler.on_new_save()
        except Exception:
            logger.exception("Wipe handling failed")
            return 0
