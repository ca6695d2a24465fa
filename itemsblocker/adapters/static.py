"""
In-process implementations of the collaborator protocols.

Used by the CLI and the tests, and usable by any host that can hand over
its item list, online participants, and permission grants up front.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set

import yaml

from itemsblocker.core.exceptions import ConfigError


@dataclass(frozen=True)
class ItemDefinition:
    shortname: str
    display_name: str


class StaticItemCatalog:
    """
    Item catalog over a fixed list of definitions.

    Resolution order:
        1. exact shortname
        2. case-insensitive exact display name (if allow_display_name_match)
        3. case-insensitive substring of display name (first match wins)

    With accept_unknown=True, a token that matches nothing is taken as a
    canonical id as-is (lowercased). The CLI uses this when no item file
    is configured.
    """

    def __init__(
        self,
        items: Iterable[ItemDefinition] = (),
        allow_display_name_match: bool = True,
        accept_unknown: bool = False,
    ):
        self.items: List[ItemDefinition] = list(items)
        self.allow_display_name_match = allow_display_name_match
        self.accept_unknown = accept_unknown
        self._by_shortname: Dict[str, ItemDefinition] = {
            item.shortname: item for item in self.items
        }

    @classmethod
    def from_yaml(cls, path: Path, **kwargs) -> "StaticItemCatalog":
        """
        Load definitions from YAML:

            items:
              - shortname: rifle.ak
                name: Assault Rifle
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read item catalog: {e}", {"path": str(path)})

        entries = data.get("items", []) if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise ConfigError("Item catalog must be a list of items", {"path": str(path)})

        items = []
        for entry in entries:
            try:
                shortname = str(entry["shortname"])
            except (KeyError, TypeError):
                raise ConfigError(f"Item entry without shortname: {entry!r}", {"path": str(path)})
            items.append(ItemDefinition(shortname, str(entry.get("name") or shortname)))
        return cls(items, **kwargs)

    def resolve_item_id(self, token: str) -> Optional[str]:
        if not token:
            return None

        if token in self._by_shortname:
            return token

        token = token.strip('"').strip()
        if not token:
            return None

        if token in self._by_shortname:
            return token

        wanted = token.casefold()

        if self.allow_display_name_match:
            for item in self.items:
                if item.display_name.casefold() == wanted:
                    return item.shortname

        for item in self.items:
            if wanted in item.display_name.casefold():
                return item.shortname

        if self.accept_unknown:
            return token.lower()
        return None

    def display_name(self, item_id: str) -> str:
        item = self._by_shortname.get(item_id)
        if item is None:
            for candidate in self.items:
                if candidate.shortname.lower() == item_id.lower():
                    return candidate.display_name
            return item_id
        return item.display_name


class StaticParticipantDirectory:
    """Numeric ids are always accepted; names must belong to an active participant."""

    def __init__(self, active: Optional[Mapping[int, str]] = None):
        self.active: Dict[int, str] = dict(active or {})

    def connect(self, participant_id: int, name: str) -> None:
        self.active[participant_id] = name

    def disconnect(self, participant_id: int) -> None:
        self.active.pop(participant_id, None)

    def resolve_participant_id(self, token: str) -> Optional[int]:
        if not token:
            return None
        token = token.strip()
        if token.isascii() and token.isdigit():
            return int(token)

        wanted = token.casefold()
        for participant_id, name in self.active.items():
            if name.casefold() == wanted:
                return participant_id
        return None


class StaticPermissions:
    """Fixed actor -> permission grants."""

    def __init__(self, grants: Optional[Mapping[int, Iterable[str]]] = None):
        self.grants: Dict[int, Set[str]] = {
            int(actor): set(perms) for actor, perms in (grants or {}).items()
        }

    def grant(self, actor_id: int, permission: str) -> None:
        self.grants.setdefault(actor_id, set()).add(permission)

    def revoke(self, actor_id: int, permission: str) -> None:
        self.grants.get(actor_id, set()).discard(permission)

    def has_permission(self, actor_id: int, permission: str) -> bool:
        return permission in self.grants.get(actor_id, ())
