"""Tests for deterministic selection primitives."""
from __future__ import annotations

import pytest

from mythic.app.core.rng import EmptyPoolError, create_rng
from mythic.app.core.selection import (
    dedupe_keep_order,
    derive_sub_seed,
    hash_line,
    pick_deterministic,
    pick_deterministic_without_immediate_repeat,
    weighted_pick_without_immediate_repeat,
)

POOL = ["ember", "frost", "storm", "stone", "tide"]


def test_derive_sub_seed():
    assert derive_sub_seed("seed", "tag") == "seed::tag"


def test_pick_deterministic_is_one_shot_pick_on_sub_seed():
    expected = create_rng("seed::tag").pick(POOL)
    assert pick_deterministic(POOL, "seed", "tag") == expected
    assert pick_deterministic(POOL, "seed", "tag") == expected


def test_pick_deterministic_empty_pool_raises():
    with pytest.raises(EmptyPoolError):
        pick_deterministic([], "seed", "tag")


class TestAntiRepeat:
    def test_never_returns_last_pick(self):
        for last in POOL:
            for i in range(40):
                picked = pick_deterministic_without_immediate_repeat(POOL, f"seed-{i}", last, "opener")
                assert picked != last
                assert picked in POOL

    def test_two_element_pool_alternates(self):
        pool = ["left", "right"]
        for i in range(25):
            assert pick_deterministic_without_immediate_repeat(pool, f"s{i}", "left", "x") == "right"

    def test_single_element_pool_returns_it_even_when_last(self):
        assert pick_deterministic_without_immediate_repeat(["solo"], "seed", "solo", "x") == "solo"

    def test_no_last_pick_matches_plain_pick(self):
        for i in range(10):
            seed = f"plain-{i}"
            assert pick_deterministic_without_immediate_repeat(POOL, seed, None, "t") == pick_deterministic(
                POOL, seed, "t"
            )

    def test_last_pick_outside_pool_is_harmless(self):
        picked = pick_deterministic_without_immediate_repeat(POOL, "seed", "not-in-pool", "t")
        assert picked == pick_deterministic(POOL, "seed", "t")

    def test_deterministic(self):
        a = pick_deterministic_without_immediate_repeat(POOL, "same", "storm", "t")
        b = pick_deterministic_without_immediate_repeat(POOL, "same", "storm", "t")
        assert a == b

    def test_empty_pool_raises(self):
        with pytest.raises(EmptyPoolError):
            pick_deterministic_without_immediate_repeat([], "seed", None, "t")


class TestWeightedAntiRepeat:
    WEIGHTS = {"tactical": 1.6, "mythic": 1.3, "whimsical": 0.8, "brutal": 0.9, "minimalist": 0.7}

    def test_never_returns_last_value(self):
        for last in self.WEIGHTS:
            for i in range(30):
                picked = weighted_pick_without_immediate_repeat(self.WEIGHTS, f"tone-{i}", last, "tone-mode")
                assert picked != last

    def test_single_key_returns_it(self):
        assert weighted_pick_without_immediate_repeat({"only": 1.0}, "s", "only", "t") == "only"

    def test_empty_raises(self):
        with pytest.raises(EmptyPoolError):
            weighted_pick_without_immediate_repeat({}, "s", None, "t")

    def test_zero_weight_keys_skipped_when_others_positive(self):
        weights = {"dead": 0.0, "alive": 1.0}
        for i in range(20):
            assert weighted_pick_without_immediate_repeat(weights, f"z{i}", None, "t") == "alive"


def test_hash_line_ignores_case_and_spacing():
    assert hash_line("The  Sky answers.") == hash_line("  the sky   answers. ")
    assert hash_line("one") != hash_line("two")


def test_hash_line_is_hex():
    int(hash_line("anything"), 16)


def test_dedupe_keep_order():
    assert dedupe_keep_order([" a ", "b", "a", "", "c", "b"]) == ["a", "b", "c"]
