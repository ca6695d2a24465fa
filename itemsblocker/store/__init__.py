"""
ItemsBlocker Policy Store

Components:
- PolicyStore: the owned, thread-safe item id -> Rule map
- StateFile: canonical JSON persistence with digest check
"""

from itemsblocker.store.persistence import StateFile, StateSnapshot, STATE_FORMAT
from itemsblocker.store.store import PolicyStore

__all__ = [
    "PolicyStore",
    "StateFile",
    "StateSnapshot",
    "STATE_FORMAT",
]
