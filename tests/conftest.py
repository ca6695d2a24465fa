"""
Shared fixtures for the ItemsBlocker test suite.

Every component takes a clock; tests hand them a FakeClock so expiry can be
driven explicitly instead of sleeping.
"""

from datetime import datetime, timedelta, timezone

import pytest

from itemsblocker.adapters.static import (
    ItemDefinition,
    StaticItemCatalog,
    StaticParticipantDirectory,
    StaticPermissions,
)
from itemsblocker.policy.evaluator import Evaluator
from itemsblocker.policy.mutator import Mutator
from itemsblocker.policy.wipe import WipeHandler
from itemsblocker.store.persistence import StateFile
from itemsblocker.store.store import PolicyStore

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

ITEMS = [
    ItemDefinition("rifle.ak", "Assault Rifle"),
    ItemDefinition("metal.facemask", "Metal Facemask"),
    ItemDefinition("rocket.warhead", "Rocket Warhead"),
    ItemDefinition("ammo.rifle", "5.56 Rifle Ammo"),
    ItemDefinition("rifle.bolt", "Bolt Action Rifle"),
]


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return StaticItemCatalog(ITEMS)


@pytest.fixture
def participants():
    return StaticParticipantDirectory({42: "Alice", 43: "Bob"})


@pytest.fixture
def permissions():
    return StaticPermissions({1: ["itemsblocker.admin"], 7: ["itemsblocker.bypass"]})


@pytest.fixture
def store(tmp_path, clock):
    return PolicyStore(state_file=StateFile(tmp_path / "blocks.json"), clock=clock)


@pytest.fixture
def evaluator(store, clock):
    return Evaluator(store, clock=clock)


@pytest.fixture
def mutator(store, catalog, participants, clock):
    return Mutator(store, catalog, participants, clock=clock)


@pytest.fixture
def wipe_handler(store):
    return WipeHandler(store)
