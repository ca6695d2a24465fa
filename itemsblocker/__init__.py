"""
itemsblocker/__init__.py

ItemsBlocker: per-participant, global, and whole-wipe item restrictions
for multiplayer game servers.

Three breadths of block:
    global       everyone, until a wall-clock instant
    participant  one participant, until a wall-clock instant
    wipe-global  everyone, until the next server wipe
"""

__version__ = "4.0.0"

from itemsblocker.core.duration import DurationKind, ParsedDuration, parse_duration
from itemsblocker.core.exceptions import (
    ItemsBlockerError,
    ValidationError,
    ItemNotFoundError,
    ParticipantNotFoundError,
    DurationError,
    ScopeError,
    NoActiveRuleError,
    PermissionDeniedError,
    StoreError,
    ConfigError,
)
from itemsblocker.core.models import Global, Participant, Rule, Scope, WipeGlobal
from itemsblocker.policy import Evaluator, Mutator, WipeHandler
from itemsblocker.runtime import BlockGuard, BlockerConfig, CommandSurface, RuntimeContext
from itemsblocker.store import PolicyStore, StateFile

__all__ = [
    # Data model
    "Rule",
    "Scope",
    "Global",
    "Participant",
    "WipeGlobal",
    "DurationKind",
    "ParsedDuration",
    "parse_duration",
    # Components
    "PolicyStore",
    "StateFile",
    "Evaluator",
    "Mutator",
    "WipeHandler",
    "BlockGuard",
    "CommandSurface",
    "BlockerConfig",
    "RuntimeContext",
    # Errors
    "ItemsBlockerError",
    "ValidationError",
    "ItemNotFoundError",
    "ParticipantNotFoundError",
    "DurationError",
    "ScopeError",
    "NoActiveRuleError",
    "PermissionDeniedError",
    "StoreError",
    "ConfigError",
]
