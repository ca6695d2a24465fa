"""
ItemsBlocker: Basic Usage Example

Demonstrates:
- Wiring a runtime around one PolicyStore
- Blocking for everyone, for one player, and for the whole wipe
- Gameplay hooks refusing blocked items
- The wipe signal clearing wipe-scoped blocks
"""

import tempfile
from pathlib import Path

from itemsblocker.adapters import (
    ItemDefinition,
    StaticItemCatalog,
    StaticParticipantDirectory,
    StaticPermissions,
)
from itemsblocker.runtime import BlockerConfig, RuntimeContext


def main():
    """Basic ItemsBlocker usage."""

    print("=" * 60)
    print("ItemsBlocker: Basic Usage Example")
    print("=" * 60)
    print()

    workdir = Path(tempfile.mkdtemp(prefix="itemsblocker-"))
    config = BlockerConfig(data_file="blocks.json", base_dir=workdir)

    catalog = StaticItemCatalog([
        ItemDefinition("rifle.ak", "Assault Rifle"),
        ItemDefinition("metal.facemask", "Metal Facemask"),
        ItemDefinition("rocket.warhead", "Rocket Warhead"),
    ])
    participants = StaticParticipantDirectory({42: "Alice", 43: "Bob"})
    permissions = StaticPermissions({1: ["itemsblocker.admin"]})

    runtime = RuntimeContext.build(
        config,
        catalog=catalog,
        participants=participants,
        authorizer=permissions,
        notifier=lambda pid, label: print(f"  [to {pid}] {label} is blocked right now."),
    )
    runtime.start()
    print(f"1. Runtime ready: {runtime!r}")
    print()

    print("2. Admin 1 issues commands...")
    for args in (
        ["rifle.ak", "2h", "all"],
        ["metal.facemask", "player", "Alice", "1d"],
        ["rocket.warhead", "wipe"],
    ):
        result = runtime.commands.handle_block_args(1, args)
        print(f"  /block {' '.join(args)} -> {result.message}")

    refused = runtime.commands.handle_block_args(43, ["rifle.ak", "2h"])
    print(f"  (Bob tries too) -> {refused.message}")
    print()

    print("3. Gameplay hooks...")
    print(f"  Bob equips Assault Rifle:   allowed={runtime.guard.can_equip_item(43, 'rifle.ak')}")
    print(f"  Alice wears Metal Facemask: allowed={runtime.guard.can_wear_item(42, 'metal.facemask')}")
    print(f"  Bob wears Metal Facemask:   allowed={runtime.guard.can_wear_item(43, 'metal.facemask')}")
    print()

    print("4. /blocklist")
    for line in runtime.commands.blocklist(1).messages:
        print(f"  {line}")
    print()

    print("5. Server wipe...")
    cleared = runtime.guard.on_new_save()
    print(f"  cleared {cleared} wipe-global block(s)")
    print(f"  Bob equips Rocket Warhead: allowed={runtime.guard.can_equip_item(43, 'rocket.warhead')}")
    print()

    runtime.stop()
    print(f"State saved to {config.data_path}")


if __name__ == "__main__":
    main()
