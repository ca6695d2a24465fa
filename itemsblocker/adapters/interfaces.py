"""
Collaborators the core consumes but does not own.

The host (game server bridge, test harness, CLI) supplies objects that
satisfy these protocols. Nothing in the core depends on how they work.
"""

from typing import Optional, Protocol


class ItemCatalog(Protocol):
    def resolve_item_id(self, token: str) -> Optional[str]:
        """Canonical item id for a user-typed token, or None."""
        ...

    def display_name(self, item_id: str) -> str:
        """Human label for an item id; the id itself when unknown."""
        ...


class ParticipantDirectory(Protocol):
    def resolve_participant_id(self, token: str) -> Optional[int]:
        """Numeric id for a literal id or an active participant's name."""
        ...


class Authorizer(Protocol):
    def has_permission(self, actor_id: int, permission: str) -> bool:
        ...
