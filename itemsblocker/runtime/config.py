"""
Configuration for ItemsBlocker.

YAML file, every key optional:

    notify_on_blocked_attempt: true
    allow_display_name_match: true
    default_duration: "2h"
    data_file: itemsblocker.json
    items_file: items.yaml          # optional item catalog
    admin_permission: itemsblocker.admin
    bypass_permission: itemsblocker.bypass
    permissions:                    # static grants, actor id -> list
      76561198000000000: [itemsblocker.admin]
    participants:                   # active participants, id -> name
      42: Alice

A missing file is created with the defaults. A file that cannot be read
falls back to the defaults with a warning; configuration problems are never
fatal.
"""

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from itemsblocker.core.duration import parse_duration
from itemsblocker.core.exceptions import ConfigError, DurationError

logger = logging.getLogger("itemsblocker.config")

PERM_ADMIN = "itemsblocker.admin"
PERM_BYPASS = "itemsblocker.bypass"


@dataclass
class BlockerConfig:
    notify_on_blocked_attempt: bool = True
    allow_display_name_match: bool = True
    default_duration: str = "2h"
    data_file: str = "itemsblocker.json"
    items_file: Optional[str] = None
    admin_permission: str = PERM_ADMIN
    bypass_permission: str = PERM_BYPASS
    permissions: Dict[int, List[str]] = field(default_factory=dict)
    participants: Dict[int, str] = field(default_factory=dict)

    # Directory relative paths are resolved against; not persisted.
    base_dir: Path = field(default_factory=Path.cwd, repr=False, compare=False)

    @property
    def data_path(self) -> Path:
        return self.base_dir / self.data_file

    @property
    def items_path(self) -> Optional[Path]:
        if not self.items_file:
            return None
        return self.base_dir / self.items_file

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("base_dir")
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any], base_dir: Optional[Path] = None) -> "BlockerConfig":
        """
        Build a config from parsed YAML.

        Raises ConfigError on unknown keys or wrongly typed values.
        """
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping")

        known = {f.name for f in fields(BlockerConfig)} - {"base_dir"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(map(str, unknown))}")

        for flag in ("notify_on_blocked_attempt", "allow_display_name_match"):
            if flag in data and not isinstance(data[flag], bool):
                raise ConfigError(f"{flag} must be true or false", {"value": data[flag]})

        default_duration = str(data.get("default_duration", "2h"))
        try:
            parse_duration(default_duration)
        except DurationError as e:
            raise ConfigError(f"Invalid default_duration: {e}")

        try:
            permissions = {
                int(actor): [str(p) for p in (perms or [])]
                for actor, perms in (data.get("permissions") or {}).items()
            }
            participants = {
                int(pid): str(name)
                for pid, name in (data.get("participants") or {}).items()
            }
        except (AttributeError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid permissions/participants section: {e}")

        return BlockerConfig(
            notify_on_blocked_attempt=data.get("notify_on_blocked_attempt", True),
            allow_display_name_match=data.get("allow_display_name_match", True),
            default_duration=default_duration,
            data_file=str(data.get("data_file", "itemsblocker.json")),
            items_file=data.get("items_file"),
            admin_permission=str(data.get("admin_permission", PERM_ADMIN)),
            bypass_permission=str(data.get("bypass_permission", PERM_BYPASS)),
            permissions=permissions,
            participants=participants,
            base_dir=base_dir or Path.cwd(),
        )


def save_config(config: BlockerConfig, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.to_dict(), f, sort_keys=False)


def load_config(path: Path) -> BlockerConfig:
    """Load config from YAML, creating or falling back to defaults as needed."""
    path = Path(path)
    base_dir = path.parent

    if not path.exists():
        config = BlockerConfig(base_dir=base_dir)
        try:
            save_config(config, path)
            logger.info(f"Created default config at {path}")
        except OSError as e:
            logger.warning(f"Could not write default config to {path}: {e}")
        return config

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return BlockerConfig.from_dict(data or {}, base_dir=base_dir)
    except (OSError, yaml.YAMLError, ConfigError) as e:
        logger.warning(f"Failed to read config {path}, using defaults: {e}")
        return BlockerConfig(base_dir=base_dir)
