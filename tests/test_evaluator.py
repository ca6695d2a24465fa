"""
tests/test_evaluator.py

is_blocked(item, participant, now) is true iff
    global_until > now  OR  wipe_global  OR  per_participant_until[p] > now

Run:
    pytest tests/test_evaluator.py -v
"""

import itertools
from datetime import timedelta

import pytest

from conftest import T0
from itemsblocker.core.models import Rule
from itemsblocker.policy.evaluator import Evaluator


def minutes(n):
    return timedelta(minutes=n)


class TestEvaluatorTruthTable:

    @pytest.mark.parametrize(
        "global_offset, wipe, participant_offset",
        list(itertools.product([None, -5, 0, 5], [False, True], [None, -5, 0, 5])),
    )
    def test_matches_definition(self, store, global_offset, wipe, participant_offset):
        """Exhaustive check of the blocked predicate against its definition."""
        rule = Rule(
            global_until=None if global_offset is None else T0 + minutes(global_offset),
            wipe_global=wipe,
            per_participant_until=(
                {} if participant_offset is None else {42: T0 + minutes(participant_offset)}
            ),
        )
        if not rule.is_empty():
            store.upsert("rifle.ak", lambda r: rule)

        expected = (
            (global_offset is not None and global_offset > 0)
            or wipe
            or (participant_offset is not None and participant_offset > 0)
        )
        evaluator = Evaluator(store, lazy_prune=False)
        assert evaluator.is_blocked("rifle.ak", 42, T0) is expected

        # Lazy prune must not change the answer either.
        assert Evaluator(store).is_blocked("rifle.ak", 42, T0) is expected


class TestEvaluatorBehaviour:

    def test_unknown_item_is_not_blocked(self, evaluator):
        assert evaluator.is_blocked("rifle.ak", 42, T0) is False

    def test_empty_item_id_is_not_blocked(self, evaluator):
        assert evaluator.is_blocked("", 42, T0) is False

    def test_lookup_is_case_insensitive(self, store, evaluator):
        store.upsert("rifle.ak", lambda r: r.with_wipe())
        assert evaluator.is_blocked("RIFLE.AK", 42, T0) is True

    def test_participant_block_is_per_participant(self, store, evaluator):
        store.upsert("metal.facemask", lambda r: r.with_participant(42, T0 + minutes(60)))
        assert evaluator.is_blocked("metal.facemask", 42, T0) is True
        assert evaluator.is_blocked("metal.facemask", 43, T0) is False

    def test_blocked_path_does_not_mutate(self, store, evaluator):
        """Rule identity is unchanged after a blocked answer."""
        rule = store.upsert(
            "rifle.ak",
            lambda r: r.with_global(T0 + minutes(5)).with_participant(43, T0 - minutes(5)),
        )
        assert evaluator.is_blocked("rifle.ak", 42, T0) is True
        assert store.get("rifle.ak") is rule

    def test_not_blocked_path_prunes_expired_rule(self, store, evaluator):
        store.upsert("rifle.ak", lambda r: r.with_global(T0 + minutes(5)))
        assert evaluator.is_blocked("rifle.ak", 42, T0 + minutes(10)) is False
        assert store.get("rifle.ak") is None

    def test_not_blocked_path_keeps_other_participants(self, store, evaluator):
        store.upsert(
            "metal.facemask",
            lambda r: r.with_participant(42, T0 - minutes(1)).with_participant(43, T0 + minutes(30)),
        )
        assert evaluator.is_blocked("metal.facemask", 42, T0) is False
        rule = store.get("metal.facemask")
        assert dict(rule.per_participant_until) == {43: T0 + minutes(30)}
        assert evaluator.is_blocked("metal.facemask", 43, T0) is True

    def test_lazy_prune_can_be_disabled(self, store):
        store.upsert("rifle.ak", lambda r: r.with_global(T0 + minutes(5)))
        evaluator = Evaluator(store, lazy_prune=False)
        assert evaluator.is_blocked("rifle.ak", 42, T0 + minutes(10)) is False
        assert store.get("rifle.ak") is not None

    def test_uses_clock_when_now_omitted(self, store, evaluator, clock):
        store.upsert("rifle.ak", lambda r: r.with_global(T0 + minutes(5)))
        assert evaluator.is_blocked("rifle.ak", 42) is True
        clock.advance(minutes=5)
        assert evaluator.is_blocked("rifle.ak", 42) is False

    def test_wipe_ignores_wall_clock(self, store, evaluator):
        store.upsert("rocket.warhead", lambda r: r.with_wipe())
        assert evaluator.is_blocked("rocket.warhead", 1, T0 + timedelta(days=3650)) is True
