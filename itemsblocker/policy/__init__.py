"""
ItemsBlocker Policy Engine

Components:
- Evaluator: per-action "is this blocked" query
- Mutator: validates and applies block/unblock commands
- WipeHandler: clears wipe-scoped blocks on a reset signal
"""

from itemsblocker.policy.evaluator import Evaluator
from itemsblocker.policy.mutator import BlockOutcome, BlockRequest, ClearOutcome, Mutator
from itemsblocker.policy.wipe import WipeHandler

__all__ = [
    "Evaluator",
    "Mutator",
    "BlockRequest",
    "BlockOutcome",
    "ClearOutcome",
    "WipeHandler",
]
