"""
Transport-agnostic command surface.

Whatever delivers command text (chat, console, RCON, the bundled CLI)
splits it into tokens and calls one of:

    handle_block_args(actor, ["rifle.ak", "2h", "all"])
    handle_unblock_args(actor, ["rifle.ak", "all"])
    blocklist(actor)

or the typed equivalents set_block / clear_block / list_blocks.
Every call returns a CommandResult; nothing here raises for bad input.

actor_id=None means the server console, which is always authorized.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from itemsblocker.adapters.interfaces import Authorizer, ItemCatalog
from itemsblocker.core.exceptions import ItemsBlockerError, PermissionDeniedError
from itemsblocker.core.models import Global, Participant, WipeGlobal
from itemsblocker.core.time import Clock, format_span, format_until, to_wire, utc_now
from itemsblocker.policy.mutator import Mutator
from itemsblocker.runtime.config import PERM_ADMIN
from itemsblocker.store.store import PolicyStore

logger = logging.getLogger("itemsblocker.commands")

BLOCK_USAGE = "Usage: /block <itemName> [duration|'wipe'] [all|player <idOrName>]"
UNBLOCK_USAGE = "Usage: /unblock <itemName> [all|wipe|player <idOrName>]"


@dataclass
class CommandResult:
    ok: bool
    messages: List[str] = field(default_factory=list)
    data: Any = None

    @property
    def message(self) -> str:
        return "\n".join(self.messages)

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class ScopeSummary:
    kind: str
    participant_id: Optional[int] = None
    until: Optional[datetime] = None
    remaining: Optional[timedelta] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "participant_id": self.participant_id,
            "until": to_wire(self.until) if self.until else None,
            "remaining_seconds": (
                int(self.remaining.total_seconds()) if self.remaining is not None else None
            ),
        }


@dataclass(frozen=True)
class BlockSummary:
    item_id: str
    label: str
    scopes: List[ScopeSummary]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "label": self.label,
            "scopes": [s.to_dict() for s in self.scopes],
        }


def render_block_list(summaries: Sequence[BlockSummary]) -> List[str]:
    """Plain-text lines for a block listing."""
    if not summaries:
        return ["No active item blocks."]

    lines = ["Active blocks:"]
    for summary in summaries:
        for scope in summary.scopes:
            if scope.kind == WipeGlobal.label:
                lines.append(f"- {summary.label}: wipe-global")
            elif scope.kind == Participant.label:
                lines.append(
                    f"- {summary.label}: player {scope.participant_id} for "
                    f"{format_span(scope.remaining)} (until {format_until(scope.until)})"
                )
            else:
                lines.append(
                    f"- {summary.label}: global for "
                    f"{format_span(scope.remaining)} (until {format_until(scope.until)})"
                )
    return lines


def _arg(args: Sequence[str], index: int) -> Optional[str]:
    return args[index] if len(args) > index else None


class CommandSurface:

    def __init__(
        self,
        mutator: Mutator,
        store: PolicyStore,
        catalog: ItemCatalog,
        authorizer: Authorizer,
        clock: Clock = utc_now,
        admin_permission: str = PERM_ADMIN,
    ):
        self.mutator = mutator
        self.store = store
        self.catalog = catalog
        self.authorizer = authorizer
        self.clock = clock
        self.admin_permission = admin_permission

    # ── Authorization ─────────────────────────────────────────

    def is_admin(self, actor_id: Optional[int]) -> bool:
        if actor_id is None:
            return True
        return self.authorizer.has_permission(actor_id, self.admin_permission)

    def _require_admin(self, actor_id: Optional[int]) -> None:
        if not self.is_admin(actor_id):
            logger.info(f"Denied command for actor {actor_id}: missing {self.admin_permission}")
            raise PermissionDeniedError(
                f"You lack permission {self.admin_permission}.",
                {"actor_id": actor_id},
            )

    # ── Typed commands ────────────────────────────────────────

    def set_block(
        self,
        actor_id: Optional[int],
        item_token: str,
        duration_token: Optional[str] = None,
        scope_token: Optional[str] = None,
        participant_token: Optional[str] = None,
    ) -> CommandResult:
        try:
            self._require_admin(actor_id)
            outcome = self.mutator.apply_block(
                item_token, duration_token, scope_token, participant_token
            )
        except ItemsBlockerError as e:
            return CommandResult(ok=False, messages=[e.message])

        label = self.catalog.display_name(outcome.item_id)
        if isinstance(outcome.scope, WipeGlobal):
            message = f"Blocked {label} for everyone for the entire wipe."
        elif isinstance(outcome.scope, Participant):
            message = (
                f"Blocked {label} for player {outcome.scope.participant_id} "
                f"until {format_until(outcome.until)}."
            )
        else:
            message = f"Blocked {label} for everyone until {format_until(outcome.until)}."
        return CommandResult(ok=True, messages=[message], data=outcome)

    def clear_block(
        self,
        actor_id: Optional[int],
        item_token: str,
        scope_token: Optional[str] = None,
        participant_token: Optional[str] = None,
    ) -> CommandResult:
        try:
            self._require_admin(actor_id)
            outcome = self.mutator.clear_block(item_token, scope_token, participant_token)
        except ItemsBlockerError as e:
            return CommandResult(ok=False, messages=[e.message])

        label = self.catalog.display_name(outcome.item_id)
        return CommandResult(
            ok=True,
            messages=[f"Unblocked {label} for scope {outcome.scope.label}."],
            data=outcome,
        )

    def list_blocks(self, now: Optional[datetime] = None) -> List[BlockSummary]:
        """
        Snapshot of every active block. Prunes and saves first, so the
        listing never shows an expired entry.
        """
        if now is None:
            now = self.clock()
        active = self.store.list_active(now)
        self.store.save()

        summaries = []
        for item_id in sorted(active):
            rule = active[item_id]
            scopes = []
            if rule.wipe_global:
                scopes.append(ScopeSummary(WipeGlobal.label))
            if rule.global_until is not None and rule.global_until > now:
                scopes.append(
                    ScopeSummary(Global.label, until=rule.global_until, remaining=rule.global_until - now)
                )
            for participant_id, until in sorted(rule.per_participant_until.items()):
                if until <= now:
                    continue
                scopes.append(
                    ScopeSummary(
                        Participant.label,
                        participant_id=participant_id,
                        until=until,
                        remaining=until - now,
                    )
                )
            summaries.append(BlockSummary(item_id, self.catalog.display_name(item_id), scopes))
        return summaries

    def blocklist(self, actor_id: Optional[int]) -> CommandResult:
        try:
            self._require_admin(actor_id)
        except PermissionDeniedError as e:
            return CommandResult(ok=False, messages=[e.message])
        summaries = self.list_blocks()
        return CommandResult(ok=True, messages=render_block_list(summaries), data=summaries)

    # ── Raw argument forms ────────────────────────────────────

    def handle_block_args(self, actor_id: Optional[int], args: Sequence[str]) -> CommandResult:
        """
        /block <item> [duration|wipe] [all|global|wipe|player <idOrName>]
        /block <item> player <idOrName> [duration]
        """
        if not args:
            if not self.is_admin(actor_id):
                return CommandResult(ok=False, messages=[f"You lack permission {self.admin_permission}."])
            return CommandResult(ok=False, messages=[BLOCK_USAGE])
        return self.set_block(actor_id, args[0], _arg(args, 1), _arg(args, 2), _arg(args, 3))

    def handle_unblock_args(self, actor_id: Optional[int], args: Sequence[str]) -> CommandResult:
        """/unblock <item> [all|global|wipe|player <idOrName>]"""
        if not args:
            if not self.is_admin(actor_id):
                return CommandResult(ok=False, messages=[f"You lack permission {self.admin_permission}."])
            return CommandResult(ok=False, messages=[UNBLOCK_USAGE])
        return self.clear_block(actor_id, args[0], _arg(args, 1), _arg(args, 2))
