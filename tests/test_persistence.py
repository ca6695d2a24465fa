"""
tests/test_persistence.py

State file and store load/save.

Laws tested:
    - save → load preserves every is_blocked answer
    - a missing, corrupt or tampered file becomes an empty store + warning
    - a failed save is a warning, never an exception
    - the file is canonical JSON (byte-identical for identical state)

Run:
    pytest tests/test_persistence.py -v
"""

import json
import logging
from datetime import timedelta

import pytest

from conftest import T0, FakeClock
from itemsblocker.core.canonical import canonical_hash
from itemsblocker.core.exceptions import StoreError
from itemsblocker.policy.evaluator import Evaluator
from itemsblocker.store.persistence import STATE_FORMAT, StateFile
from itemsblocker.store.store import PolicyStore


def _populate(mutator):
    mutator.apply_block("rifle.ak", "2h", "all")
    mutator.apply_block("rocket.warhead", "wipe")
    mutator.apply_block("metal.facemask", "1d", "player", "42")
    mutator.apply_block("metal.facemask", "90m", "player", "43")
    mutator.apply_block("ammo.rifle", "45s", "player", "42")


class TestRoundTrip:

    def test_save_then_load_preserves_answers(self, tmp_path, mutator, store, evaluator):
        _populate(mutator)

        items = ["rifle.ak", "rocket.warhead", "metal.facemask", "ammo.rifle", "rifle.bolt"]
        participants = [42, 43, 44]
        times = [T0 + timedelta(minutes=m) for m in (0, 1, 60, 100, 119, 121, 1439, 1441)]

        before = {
            (i, p, t): Evaluator(store, lazy_prune=False).is_blocked(i, p, t)
            for i in items for p in participants for t in times
        }

        reloaded = PolicyStore(state_file=StateFile(store.state_file.path), clock=FakeClock())
        assert reloaded.load() is True
        after = {
            (i, p, t): Evaluator(reloaded, lazy_prune=False).is_blocked(i, p, t)
            for i in items for p in participants for t in times
        }
        assert after == before

    def test_last_saved_is_recorded(self, mutator, store, clock):
        clock.advance(minutes=3)
        mutator.apply_block("rifle.ak", "2h", "all")
        reloaded = PolicyStore.from_path(store.state_file.path)
        reloaded.load()
        assert reloaded.last_saved == T0 + timedelta(minutes=3)

    def test_document_layout(self, mutator, store):
        mutator.apply_block("metal.facemask", "1d", "player", "42")
        with open(store.state_file.path, "r", encoding="utf-8") as f:
            document = json.load(f)
        assert document["format"] == STATE_FORMAT
        assert document["last_saved"].endswith("Z")
        assert document["items"] == {
            "metal.facemask": {
                "global_until": None,
                "wipe_global": False,
                "per_participant_until": {"42": "2026-01-02T12:00:00.000000Z"},
            }
        }
        assert document["digest"] == canonical_hash(document["items"])

    def test_canonical_bytes_are_stable(self, mutator, store):
        _populate(mutator)
        first = store.state_file.path.read_bytes()
        store.save()
        assert store.state_file.path.read_bytes() == first
        assert b"\n" not in first
        assert b" " not in first

    def test_no_temp_file_left_behind(self, mutator, store, tmp_path):
        _populate(mutator)
        assert [p.name for p in tmp_path.iterdir()] == ["blocks.json"]


class TestLoadRecovery:

    def test_missing_file_gives_empty_store(self, store, caplog):
        with caplog.at_level(logging.WARNING, logger="itemsblocker.store"):
            assert store.load() is False
        assert len(store) == 0
        assert "starting empty" in caplog.text

    def test_corrupt_json(self, store, caplog):
        store.state_file.path.write_text("{not json", encoding="utf-8")
        store.upsert("rifle.ak", lambda r: r.with_wipe())
        with caplog.at_level(logging.WARNING, logger="itemsblocker.store"):
            assert store.load() is False
        assert len(store) == 0
        assert "Could not load block data" in caplog.text

    def test_tampered_file_is_rejected(self, mutator, store, caplog):
        mutator.apply_block("rifle.ak", "2h", "all")
        path = store.state_file.path
        document = json.loads(path.read_text(encoding="utf-8"))
        document["items"]["rifle.ak"]["global_until"] = "2099-01-01T00:00:00.000000Z"
        path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(StoreError, match="digest"):
            store.state_file.load()
        with caplog.at_level(logging.WARNING, logger="itemsblocker.store"):
            store.load()
        assert store.get("rifle.ak") is None

    @pytest.mark.parametrize("document", [
        [],
        {"format": "something-else", "items": {}},
        {"format": STATE_FORMAT},
        {"format": STATE_FORMAT, "items": {"rifle.ak": {"wipe_global": "yes"}},
         "digest": canonical_hash({"rifle.ak": {"wipe_global": "yes"}})},
    ])
    def test_malformed_documents(self, store, document):
        store.state_file.path.write_text(json.dumps(document), encoding="utf-8")
        with pytest.raises(StoreError):
            store.state_file.load()
        assert store.load() is False
        assert len(store) == 0

    def test_empty_rules_in_file_are_dropped(self, store):
        items = {"rifle.ak": {"global_until": None, "wipe_global": False, "per_participant_until": {}}}
        document = {"format": STATE_FORMAT, "items": items, "digest": canonical_hash(items)}
        store.state_file.path.write_text(json.dumps(document), encoding="utf-8")
        assert store.load() is True
        assert len(store) == 0


class TestSaveFailure:

    def test_failed_save_is_a_warning(self, tmp_path, clock, caplog):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        store = PolicyStore.from_path(blocker / "blocks.json", clock=clock)
        store.upsert("rifle.ak", lambda r: r.with_wipe())

        with caplog.at_level(logging.WARNING, logger="itemsblocker.store"):
            assert store.save() is False
        assert "Could not save block data" in caplog.text
        assert store.get("rifle.ak").wipe_global is True

    def test_mutation_succeeds_even_if_save_fails(self, tmp_path, catalog, participants, clock):
        from itemsblocker.policy.mutator import Mutator

        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        store = PolicyStore.from_path(blocker / "blocks.json", clock=clock)
        mutator = Mutator(store, catalog, participants, clock=clock)

        mutator.apply_block("rifle.ak", "2h", "all")
        assert Evaluator(store).is_blocked("rifle.ak", 42, T0) is True

    def test_in_memory_store_does_not_save(self, clock):
        store = PolicyStore(clock=clock)
        assert store.save() is False
        assert store.load() is False


class TestItemKeys:

    def test_keys_differing_only_by_case_are_rejected(self, store):
        rule = {"global_until": None, "wipe_global": True, "per_participant_until": {}}
        items = {"rifle.ak": rule, "Rifle.AK": rule}
        document = {"format": STATE_FORMAT, "items": items, "digest": canonical_hash(items)}
        store.state_file.path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(StoreError, match="Duplicate item id"):
            store.state_file.load()
        assert store.load() is False
        assert len(store) == 0
