"""Deterministic selection primitives built on the seeded random source."""
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import TypeVar

from mythic.app.constants import TONE_WEIGHT_EPSILON
from mythic.app.core.rng import EmptyPoolError, create_rng, hash32, stable_float, stable_int

T = TypeVar("T")
K = TypeVar("K", bound=str)


def derive_sub_seed(seed_key: str, purpose_tag: str = "") -> str:
    return f"{seed_key}::{purpose_tag}"


def pick_deterministic(pool: Sequence[T], seed_key: str, purpose_tag: str = "") -> T:
    """One-shot pick: a fresh generator on ``seed_key::purpose_tag`` draws once."""
    if not pool:
        raise EmptyPoolError(f"pick_deterministic requires a non-empty pool (purpose={purpose_tag!r})")
    return create_rng(derive_sub_seed(seed_key, purpose_tag)).pick(pool)


def pick_deterministic_without_immediate_repeat(
    pool: Sequence[T],
    seed_key: str,
    last_picked: T | None,
    purpose_tag: str = "",
) -> T:
    """Pick like :func:`pick_deterministic` but never return ``last_picked`` twice in a row.

    A single-element pool returns its element unconditionally. Otherwise the
    first draw is rerolled on secondary sub-seeds (at most ``len(pool)``
    attempts); if every reroll still lands on ``last_picked`` the result is
    chosen deterministically among the remaining members.
    """
    if not pool:
        raise EmptyPoolError(
            f"pick_deterministic_without_immediate_repeat requires a non-empty pool (purpose={purpose_tag!r})"
        )
    if len(pool) == 1:
        return pool[0]

    sub_seed = derive_sub_seed(seed_key, purpose_tag)
    choice = create_rng(sub_seed).pick(pool)
    if last_picked is None:
        return choice

    attempt = 1
    while choice == last_picked and attempt <= len(pool):
        choice = create_rng(f"{sub_seed}::reroll:{attempt}").pick(pool)
        attempt += 1
    if choice != last_picked:
        return choice

    others = [entry for entry in pool if entry != last_picked]
    if not others:
        # Every member equals last_picked; nothing else to offer.
        return pool[0]
    return others[stable_int(sub_seed, "reroll-fallback") % len(others)]


def weighted_pick_without_immediate_repeat(
    weights: Mapping[K, float],
    seed_key: str,
    last_value: K | None,
    purpose_tag: str = "",
) -> K:
    """Weighted choice over mapping keys, skipping ``last_value`` when another key exists."""
    keys = list(weights.keys())
    if not keys:
        raise EmptyPoolError("weighted_pick_without_immediate_repeat requires at least one key")
    candidates = [key for key in keys if (weights.get(key) or 0) > 0] or list(keys)
    if last_value and len(candidates) > 1:
        without_last = [key for key in candidates if key != last_value]
        if without_last:
            candidates = without_last

    total = sum(max(TONE_WEIGHT_EPSILON, weights.get(key) or 0) for key in candidates)
    roll = stable_float(seed_key, purpose_tag) * total
    cursor = 0.0
    for key in candidates:
        cursor += max(TONE_WEIGHT_EPSILON, weights.get(key) or 0)
        if roll <= cursor:
            return key
    return candidates[-1]


def hash_line(text: str) -> str:
    """Short hex fingerprint of a narration line (case and spacing insensitive)."""
    clean = re.sub(r"\s+", " ", str(text).strip().lower())
    return format(hash32(clean), "x")


def dedupe_keep_order(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for value in values:
        clean = str(value).strip()
        if not clean or clean in seen:
            continue
        seen.add(clean)
        out.append(clean)
    return out
