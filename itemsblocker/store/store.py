"""
Policy store: canonical item id -> Rule.

Thread model:
    Readers: get() is a single dict lookup, no lock. Rules are immutable,
        so whatever a reader gets is a complete Rule.
    Writers: every mutation holds self._lock and replaces the whole Rule
        in one assignment (or deletes the key).

Empty rules are never left in the map: upsert(), prune(), prune_item()
and clear_wipe_flags() all drop a key whose Rule has nothing left.
"""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional

from itemsblocker.core.exceptions import StoreError
from itemsblocker.core.models import EMPTY_RULE, Rule
from itemsblocker.core.time import Clock, utc_now
from itemsblocker.store.persistence import StateFile

logger = logging.getLogger("itemsblocker.store")

Mutation = Callable[[Rule], Rule]


def _key(item_id: str) -> str:
    return item_id.lower()


class PolicyStore:
    """
    The single rule set for a running server.

    Construct one, pass it by reference to the evaluator, mutator and wipe
    handler. Persistence is optional; without a StateFile the store lives
    in memory only.
    """

    def __init__(
        self,
        state_file: Optional[StateFile] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.state_file = state_file
        self.clock = clock
        self.last_saved: Optional[datetime] = None

        self._lock: threading.RLock = threading.RLock()
        self._rules: Dict[str, Rule] = {}

    @classmethod
    def from_path(cls, path: Path, clock: Clock = utc_now) -> "PolicyStore":
        return cls(state_file=StateFile(path), clock=clock)

    # ── Reads ─────────────────────────────────────────────────

    def get(self, item_id: str) -> Optional[Rule]:
        return self._rules.get(_key(item_id))

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, item_id: str) -> bool:
        return _key(item_id) in self._rules

    def snapshot(self) -> Dict[str, Rule]:
        """Shallow copy of the rule map. Rules themselves are immutable."""
        with self._lock:
            return dict(self._rules)

    def list_active(self, now: Optional[datetime] = None) -> Dict[str, Rule]:
        """Prune, then return every rule with a restriction in force at `now`."""
        if now is None:
            now = self.clock()
        with self._lock:
            self.prune(now)
            return {
                item_id: rule
                for item_id, rule in self._rules.items()
                if rule.is_active(now)
            }

    # ── Writes ────────────────────────────────────────────────

    def upsert(self, item_id: str, mutation: Mutation) -> Optional[Rule]:
        """
        Apply `mutation` to the current Rule (or an empty one) and swap in
        the result. Entries already expired by the store clock are dropped
        first. Returns the stored Rule, or None if nothing was left and the
        key was removed.
        """
        key = _key(item_id)
        with self._lock:
            current = self._rules.get(key, EMPTY_RULE)
            updated = mutation(current).pruned(self.clock())
            if updated.is_empty():
                self._rules.pop(key, None)
                return None
            self._rules[key] = updated
            return updated

    def remove(self, item_id: str) -> None:
        with self._lock:
            self._rules.pop(_key(item_id), None)

    def prune(self, now: Optional[datetime] = None) -> int:
        """
        Drop expired timed entries and empty rules. wipe_global is left alone.

        Returns the number of rules removed.
        """
        if now is None:
            now = self.clock()
        removed = 0
        with self._lock:
            for key, rule in list(self._rules.items()):
                pruned = rule.pruned(now)
                if pruned.is_empty():
                    del self._rules[key]
                    removed += 1
                elif pruned is not rule:
                    self._rules[key] = pruned
        return removed

    def prune_item(self, item_id: str, now: datetime, expected: Optional[Rule] = None) -> None:
        """
        Prune a single rule.

        When `expected` is given, the rule is only replaced if it is still
        that exact object, so a concurrent writer's newer Rule always wins.
        """
        key = _key(item_id)
        with self._lock:
            rule = self._rules.get(key)
            if rule is None:
                return
            if expected is not None and rule is not expected:
                return
            pruned = rule.pruned(now)
            if pruned.is_empty():
                del self._rules[key]
            elif pruned is not rule:
                self._rules[key] = pruned

    def clear_wipe_flags(self) -> int:
        """
        Set wipe_global = False everywhere and drop entries that have
        already expired. Returns how many rules carried the flag.
        """
        now = self.clock()
        cleared = 0
        with self._lock:
            for key, rule in list(self._rules.items()):
                if not rule.wipe_global:
                    continue
                cleared += 1
                updated = rule.without_wipe().pruned(now)
                if updated.is_empty():
                    del self._rules[key]
                else:
                    self._rules[key] = updated
        return cleared

    def replace_all(self, rules: Dict[str, Rule]) -> None:
        with self._lock:
            self._rules = {
                _key(item_id): rule
                for item_id, rule in rules.items()
                if not rule.is_empty()
            }

    # ── Persistence ───────────────────────────────────────────

    def load(self) -> bool:
        """
        Replace the in-memory rules with the persisted ones.

        A missing, corrupt or tampered file yields an empty store and a
        warning. Returns True if persisted rules were loaded.
        """
        if self.state_file is None:
            return False

        if not self.state_file.exists():
            logger.warning(
                f"No block data at {self.state_file.path}, starting empty"
            )
            self.replace_all({})
            return False

        try:
            snapshot = self.state_file.load()
        except StoreError as e:
            logger.warning(f"Could not load block data, starting empty: {e}")
            self.replace_all({})
            return False

        self.replace_all(snapshot.rules)
        self.last_saved = snapshot.last_saved
        logger.info(
            f"Loaded {len(self._rules)} item rule(s) from {self.state_file.path}"
        )
        return True

    def save(self) -> bool:
        """
        Persist the current rules. A failed write is logged and reported as
        False; it never raises.
        """
        if self.state_file is None:
            return False

        saved_at = self.clock()
        with self._lock:
            try:
                self.state_file.save(self._rules, saved_at)
            except StoreError as e:
                logger.warning(f"Could not save block data: {e}")
                return False
            self.last_saved = saved_at
        return True
