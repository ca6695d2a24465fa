"""
Block evaluator, the per-action query.

PROTOCOL INVARIANT: Check order matters for cost.
Order: lookup → global timed → wipe-global → per-participant
(most common and cheapest first, short-circuit on the first hit)

The blocked path never writes. On the not-blocked path the evaluator may
prune the rule it just read; that is housekeeping only and cannot change
the answer, since every check above is made against `now` directly.
"""

from datetime import datetime
from typing import Optional

from itemsblocker.core.time import Clock, utc_now
from itemsblocker.store.store import PolicyStore


class Evaluator:
    """Answers "is this item blocked for this participant right now"."""

    def __init__(
        self,
        store: PolicyStore,
        clock: Clock = utc_now,
        lazy_prune: bool = True,
    ):
        self.store = store
        self.clock = clock
        self.lazy_prune = lazy_prune

    def is_blocked(
        self,
        item_id: str,
        participant_id: int,
        now: Optional[datetime] = None,
    ) -> bool:
        if not item_id:
            return False

        rule = self.store.get(item_id)
        if rule is None:
            return False

        if now is None:
            now = self.clock()

        if rule.global_until is not None and rule.global_until > now:
            return True

        if rule.wipe_global:
            return True

        until = rule.per_participant_until.get(participant_id)
        if until is not None and until > now:
            return True

        if self.lazy_prune:
            self.store.prune_item(item_id, now, expected=rule)
        return False
