"""
Wipe lifecycle: what happens when the server starts a new save.

Only wipe_global flags are touched. Timed global blocks and per-participant
entries run on the wall clock and survive a wipe untouched.
"""

import logging

from itemsblocker.store.store import PolicyStore

logger = logging.getLogger("itemsblocker.wipe")


class WipeHandler:

    def __init__(self, store: PolicyStore):
        self.store = store

    def on_new_save(self) -> int:
        """
        Clear every wipe-global flag and drop rules left empty.

        Idempotent: a second call with no mutation in between finds no flags
        and changes nothing. Returns the number of flags cleared.
        """
        cleared = self.store.clear_wipe_flags()
        self.store.save()
        logger.info(f"Wipe detected, cleared wipe-global flags ({cleared} item(s))")
        return cleared
