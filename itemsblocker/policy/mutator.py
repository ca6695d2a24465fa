"""
Rule mutator, the interpreter behind /block and /unblock.

Two stages:

    resolve_block()  tokens → BlockRequest(item_id, Scope, span)
                     all validation happens here; nothing is written
    apply_block()    BlockRequest → one atomic Rule replacement → save

Accepted token orders for a block (both yield the same BlockRequest):

    (duration, scope[, participant])      2h all
                                          1d player 42
    (player, participant[, duration])     player 42 1d

A "wipe" duration turns a global block into a wipe-global one. Combining
a participant scope with "wipe" is rejected rather than guessed at.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from itemsblocker.adapters.interfaces import ItemCatalog, ParticipantDirectory
from itemsblocker.core.duration import EXAMPLES, is_wipe_token, parse_duration
from itemsblocker.core.exceptions import (
    DurationError,
    ItemNotFoundError,
    NoActiveRuleError,
    ParticipantNotFoundError,
    ScopeError,
)
from itemsblocker.core.models import Global, Participant, Rule, Scope, WipeGlobal
from itemsblocker.core.time import Clock, utc_now
from itemsblocker.store.store import PolicyStore

logger = logging.getLogger("itemsblocker.mutator")

GLOBAL_WORDS = ("all", "global")
PARTICIPANT_WORDS = ("player", "participant")
WIPE_WORDS = ("wipe",)

DEFAULT_DURATION = "2h"
DEFAULT_SCOPE = "all"

SCOPE_HELP = "all | global | wipe | player <idOrName>"


@dataclass(frozen=True)
class BlockRequest:
    """A fully validated block, ready to apply."""
    item_id: str
    scope: Scope
    span: Optional[timedelta] = None


@dataclass(frozen=True)
class BlockOutcome:
    item_id: str
    scope: Scope
    until: Optional[datetime]
    rule: Rule


@dataclass(frozen=True)
class ClearOutcome:
    item_id: str
    scope: Scope
    rule: Optional[Rule]

    @property
    def rule_removed(self) -> bool:
        return self.rule is None


def _word(token: Optional[str]) -> str:
    return token.strip().lower() if token else ""


class Mutator:
    """Applies block/unblock commands to a PolicyStore."""

    def __init__(
        self,
        store: PolicyStore,
        catalog: ItemCatalog,
        participants: ParticipantDirectory,
        clock: Clock = utc_now,
        default_duration: str = DEFAULT_DURATION,
    ):
        self.store = store
        self.catalog = catalog
        self.participants = participants
        self.clock = clock
        self.default_duration = default_duration

    # ── Resolution ────────────────────────────────────────────

    def resolve_item(self, item_token: str) -> str:
        item_id = self.catalog.resolve_item_id(item_token) if item_token else None
        if item_id is None:
            raise ItemNotFoundError(
                f"Unknown item: {item_token}. Use shortname or display name.",
                {"token": item_token},
            )
        return item_id

    def resolve_participant(self, participant_token: Optional[str]) -> int:
        participant_id = None
        if participant_token:
            participant_id = self.participants.resolve_participant_id(participant_token)
        if participant_id is None:
            raise ParticipantNotFoundError(
                f"Cannot resolve player: {participant_token}. "
                "Provide a numeric id or exact name.",
                {"token": participant_token},
            )
        return participant_id

    def parse_scope(
        self,
        scope_token: Optional[str],
        participant_token: Optional[str] = None,
    ) -> Scope:
        word = _word(scope_token) or DEFAULT_SCOPE
        if word in GLOBAL_WORDS:
            return Global()
        if word in WIPE_WORDS:
            return WipeGlobal()
        if word in PARTICIPANT_WORDS:
            return Participant(self.resolve_participant(participant_token))
        raise ScopeError(
            f"Scope must be one of: {SCOPE_HELP}", {"token": scope_token}
        )

    def _positive_span(self, duration_token: str) -> timedelta:
        parsed = parse_duration(duration_token)
        if not parsed.is_positive:
            raise DurationError(
                f"Duration must be > 0. Examples: {EXAMPLES}",
                {"token": duration_token},
            )
        return parsed.span

    def resolve_block(
        self,
        item_token: str,
        duration_token: Optional[str] = None,
        scope_token: Optional[str] = None,
        participant_token: Optional[str] = None,
    ) -> BlockRequest:
        """
        Validate a block command without touching the store.

        Raises a ValidationError subclass on the first problem found:
        item, then scope/participant, then duration.
        """
        item_id = self.resolve_item(item_token)

        # Alternate order: player <participant> [duration]
        if _word(duration_token) in PARTICIPANT_WORDS:
            duration_token, scope_token, participant_token = (
                participant_token, duration_token, scope_token,
            )

        if not duration_token:
            duration_token = self.default_duration

        scope = self.parse_scope(scope_token, participant_token)
        wipe_duration = is_wipe_token(duration_token)

        if isinstance(scope, Participant):
            if wipe_duration:
                raise ScopeError(
                    "Per-player blocks require a concrete duration (not 'wipe').",
                    {"participant_id": scope.participant_id},
                )
            return BlockRequest(item_id, scope, self._positive_span(duration_token))

        if isinstance(scope, WipeGlobal) or wipe_duration:
            return BlockRequest(item_id, WipeGlobal())

        return BlockRequest(item_id, scope, self._positive_span(duration_token))

    # ── Mutation ──────────────────────────────────────────────

    def apply_block(
        self,
        item_token: str,
        duration_token: Optional[str] = None,
        scope_token: Optional[str] = None,
        participant_token: Optional[str] = None,
    ) -> BlockOutcome:
        request = self.resolve_block(
            item_token, duration_token, scope_token, participant_token
        )
        return self.apply(request)

    def apply(self, request: BlockRequest, now: Optional[datetime] = None) -> BlockOutcome:
        """Write a validated BlockRequest as one Rule replacement, then save."""
        if now is None:
            now = self.clock()

        until = None
        if request.span is not None:
            try:
                until = now + request.span
            except OverflowError:
                raise DurationError(
                    "Duration out of range", {"span": str(request.span)}
                )

        scope = request.scope
        if isinstance(scope, Global):
            rule = self.store.upsert(request.item_id, lambda r: r.with_global(until))
        elif isinstance(scope, WipeGlobal):
            rule = self.store.upsert(request.item_id, lambda r: r.with_wipe())
        else:
            rule = self.store.upsert(
                request.item_id,
                lambda r: r.with_participant(scope.participant_id, until),
            )

        self.store.save()
        logger.info(
            f"Blocked {request.item_id} scope={scope.label}"
            + (f" participant={scope.participant_id}" if isinstance(scope, Participant) else "")
            + (f" until={until.isoformat()}" if until else "")
        )
        return BlockOutcome(request.item_id, scope, until, rule)

    def clear_block(
        self,
        item_token: str,
        scope_token: Optional[str] = None,
        participant_token: Optional[str] = None,
    ) -> ClearOutcome:
        """
        Remove restrictions from an item.

            all | global   clear the timed global block and the wipe flag
            wipe           clear only the wipe flag
            player <p>     remove only that participant's entry

        Raises NoActiveRuleError if the item has no rule at all.
        """
        item_id = self.resolve_item(item_token)

        if self.store.get(item_id) is None:
            raise NoActiveRuleError(
                f"No active blocks found for {self.catalog.display_name(item_id)}.",
                {"item_id": item_id},
            )

        scope = self.parse_scope(scope_token, participant_token)
        if isinstance(scope, Global):
            rule = self.store.upsert(item_id, lambda r: r.without_global())
        elif isinstance(scope, WipeGlobal):
            rule = self.store.upsert(item_id, lambda r: r.without_wipe())
        else:
            rule = self.store.upsert(
                item_id, lambda r: r.without_participant(scope.participant_id)
            )

        self.store.save()
        logger.info(f"Unblocked {item_id} scope={scope.label}")
        return ClearOutcome(item_id, scope, rule)
