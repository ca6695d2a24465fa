"""ItemsBlocker collaborator protocols and in-process implementations."""

from itemsblocker.adapters.interfaces import Authorizer, ItemCatalog, ParticipantDirectory
from itemsblocker.adapters.static import (
    ItemDefinition,
    StaticItemCatalog,
    StaticParticipantDirectory,
    StaticPermissions,
)

__all__ = [
    "Authorizer",
    "ItemCatalog",
    "ParticipantDirectory",
    "ItemDefinition",
    "StaticItemCatalog",
    "StaticParticipantDirectory",
    "StaticPermissions",
]
