"""
itemsblocker/core/models.py

Block data model.

A Rule is an immutable value. Every change builds a new Rule and the store
swaps it in with a single assignment, so a reader holding a Rule never sees
a half-applied mutation.

    global_until           blocked for everyone until this instant (or None)
    wipe_global            blocked for everyone until the next reset signal
    per_participant_until  participant id -> blocked until this instant

Scope is the closed variant produced once by the mutator's parsing stage:
    Global | Participant(participant_id) | WipeGlobal
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from itemsblocker.core.time import from_wire, to_wire


# ─────────────────────────────────────────────────────────────
# Scope
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Global:
    """Everyone, until a wall-clock instant."""
    label = "global"


@dataclass(frozen=True)
class Participant:
    """One participant, until a wall-clock instant."""
    participant_id: int
    label = "participant"


@dataclass(frozen=True)
class WipeGlobal:
    """Everyone, until the next reset signal."""
    label = "wipe-global"


Scope = Union[Global, Participant, WipeGlobal]


# ─────────────────────────────────────────────────────────────
# Rule
# ─────────────────────────────────────────────────────────────

def _frozen(mapping: Mapping[int, datetime]) -> Mapping[int, datetime]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Rule:
    global_until: Optional[datetime] = None
    wipe_global: bool = False
    per_participant_until: Mapping[int, datetime] = field(
        default_factory=lambda: _frozen({})
    )

    def __post_init__(self):
        if not isinstance(self.per_participant_until, MappingProxyType):
            object.__setattr__(
                self, "per_participant_until", _frozen(self.per_participant_until)
            )

    # ── Queries ───────────────────────────────────────────────

    def is_empty(self) -> bool:
        """No restriction recorded at all, regardless of the clock."""
        return (
            self.global_until is None
            and not self.wipe_global
            and not self.per_participant_until
        )

    def is_active(self, now: datetime) -> bool:
        """At least one restriction still in force at `now`."""
        if self.global_until is not None and self.global_until > now:
            return True
        if self.wipe_global:
            return True
        return any(until > now for until in self.per_participant_until.values())

    # ── Transitions (each returns a new Rule) ─────────────────

    def pruned(self, now: datetime) -> "Rule":
        """Drop timed entries at or before `now`. wipe_global is untouched."""
        global_expired = self.global_until is not None and self.global_until <= now
        participant_expired = any(
            until <= now for until in self.per_participant_until.values()
        )
        if not global_expired and not participant_expired:
            return self

        remaining = {
            pid: until
            for pid, until in self.per_participant_until.items()
            if until > now
        }
        return Rule(
            None if global_expired else self.global_until,
            self.wipe_global,
            remaining,
        )

    def with_global(self, until: datetime) -> "Rule":
        return replace(self, global_until=until, wipe_global=False)

    def with_wipe(self) -> "Rule":
        return replace(self, global_until=None, wipe_global=True)

    def with_participant(self, participant_id: int, until: datetime) -> "Rule":
        entries = dict(self.per_participant_until)
        entries[participant_id] = until
        return replace(self, per_participant_until=entries)

    def without_global(self) -> "Rule":
        """Clear both everyone-scoped restrictions."""
        return replace(self, global_until=None, wipe_global=False)

    def without_wipe(self) -> "Rule":
        if not self.wipe_global:
            return self
        return replace(self, wipe_global=False)

    def without_participant(self, participant_id: int) -> "Rule":
        if participant_id not in self.per_participant_until:
            return self
        entries = dict(self.per_participant_until)
        del entries[participant_id]
        return replace(self, per_participant_until=entries)

    # ── Serialization ─────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "global_until": to_wire(self.global_until) if self.global_until else None,
            "wipe_global": self.wipe_global,
            "per_participant_until": {
                str(pid): to_wire(until)
                for pid, until in sorted(self.per_participant_until.items())
            },
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Rule":
        """
        Build a Rule from its persisted form.

        Raises KeyError/ValueError/TypeError on malformed input; the caller
        decides whether that is fatal.
        """
        raw_global = data.get("global_until")
        wipe = data.get("wipe_global", False)
        if not isinstance(wipe, bool):
            raise TypeError(f"wipe_global must be a bool, got {wipe!r}")
        entries = {
            int(pid): from_wire(until)
            for pid, until in (data.get("per_participant_until") or {}).items()
        }
        return Rule(
            global_until=from_wire(raw_global) if raw_global is not None else None,
            wipe_global=wipe,
            per_participant_until=entries,
        )


EMPTY_RULE = Rule()
