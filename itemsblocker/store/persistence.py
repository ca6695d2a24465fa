"""
State file for the policy store.

ALIGNED TO: state format "itemsblocker/1"

One JSON document, written as RFC 8785 canonical bytes:

    {
      "format":     "itemsblocker/1",
      "last_saved": "<wire timestamp>",
      "items":      { "<item id>": <Rule.to_dict()> , ... },
      "digest":     sha256(canonical(items))
    }

The digest is checked on load. A file that fails to parse or whose digest
does not match is reported as StoreError; the store decides how to recover.
"""

import json
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Mapping, Optional

from itemsblocker.core.canonical import canonical_hash, canonicalize
from itemsblocker.core.exceptions import StoreError
from itemsblocker.core.models import Rule
from itemsblocker.core.time import from_wire, to_wire

STATE_FORMAT = "itemsblocker/1"


@dataclass
class StateSnapshot:
    """What a load returns."""
    rules: Dict[str, Rule]
    last_saved: Optional[datetime]


class StateFile:
    """Reads and writes the persisted rule set."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> StateSnapshot:
        """
        Read the state file.

        Returns an empty snapshot when the file does not exist.
        Raises StoreError on unreadable, malformed, or tampered content.
        """
        if not self.path.exists():
            return StateSnapshot(rules={}, last_saved=None)

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Invalid JSON in state file: {e}", {"path": str(self.path)})
        except OSError as e:
            raise StoreError(f"Failed to read state file: {e}", {"path": str(self.path)})

        if not isinstance(document, dict):
            raise StoreError("State file root must be an object", {"path": str(self.path)})

        fmt = document.get("format")
        if fmt != STATE_FORMAT:
            raise StoreError(
                f"Unsupported state format: {fmt!r}",
                {"expected": STATE_FORMAT, "path": str(self.path)},
            )

        items = document.get("items")
        if not isinstance(items, dict):
            raise StoreError("State file has no items object", {"path": str(self.path)})

        digest = document.get("digest")
        if digest != canonical_hash(items):
            raise StoreError("State file digest mismatch", {"path": str(self.path)})

        rules = {}
        for item_id, raw in items.items():
            key = item_id.lower()
            if key in rules:
                raise StoreError(
                    f"Duplicate item id (ignoring case): {item_id}",
                    {"path": str(self.path)},
                )
            try:
                rules[key] = Rule.from_dict(raw)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise StoreError(
                    f"Malformed rule for {item_id}: {e}", {"path": str(self.path)}
                )

        last_saved = None
        if document.get("last_saved"):
            try:
                last_saved = from_wire(document["last_saved"])
            except ValueError:
                last_saved = None

        return StateSnapshot(rules=rules, last_saved=last_saved)

    def save(self, rules: Mapping[str, Rule], saved_at: datetime) -> None:
        """
        Write the state file atomically.

        Raises StoreError if the write fails; the previous file is left intact.
        """
        items = {item_id: rule.to_dict() for item_id, rule in rules.items()}
        document = {
            "format": STATE_FORMAT,
            "last_saved": to_wire(saved_at),
            "items": items,
            "digest": canonical_hash(items),
        }

        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "wb") as f:
                f.write(canonicalize(document))
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise StoreError(f"Failed to write state file: {e}", {"path": str(self.path)})
