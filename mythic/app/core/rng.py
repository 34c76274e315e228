"""Seeded random source: FNV-1a seed hashing + mulberry32 float stream.

All arithmetic is 32-bit with wraparound so the sequence is bit-identical to
the JavaScript implementation the game client uses for replays.
"""
from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from mythic.app.constants import WEIGHT_EPSILON

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619
_MULBERRY_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296


class EmptyPoolError(ValueError):
    """Raised when a selection is attempted on a zero-length pool (data defect)."""


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def _utf16_units(text: str):
    for ch in text:
        code = ord(ch)
        if code > 0xFFFF:
            code -= 0x10000
            yield 0xD800 + (code >> 10)
            yield 0xDC00 + (code & 0x3FF)
        else:
            yield code


def hash32(seed: str) -> int:
    """Fold a seed string into an unsigned 32-bit integer (FNV-1a over UTF-16 units).

    Examples:
        >>> hash32("")
        2166136261
        >>> hash32("a")
        3826002220
    """
    value = _FNV_OFFSET
    for unit in _utf16_units(str(seed)):
        value ^= unit
        value = _imul(value, _FNV_PRIME)
    return value & _MASK32


@dataclass(frozen=True)
class GeneratorState:
    """Immutable mulberry32 counter. Advance it with :func:`advance`."""
    counter: int


def make_generator(seed_uint32: int) -> GeneratorState:
    return GeneratorState(counter=int(seed_uint32) & _MASK32)


def advance(state: GeneratorState) -> tuple[GeneratorState, float]:
    """Return (next_state, value) where value is a float in [0, 1)."""
    t = (state.counter + _MULBERRY_INCREMENT) & _MASK32
    x = _imul(t ^ (t >> 15), t | 1)
    x ^= (x + _imul(x ^ (x >> 7), x | 61)) & _MASK32
    x &= _MASK32
    value = ((x ^ (x >> 14)) & _MASK32) / _TWO_POW_32
    return GeneratorState(counter=t), value


def _entry_weight(entry: Any) -> float:
    if isinstance(entry, Mapping):
        raw = entry.get("weight", 0)
    else:
        raw = getattr(entry, "weight", 0)
    try:
        weight = float(raw or 0)
    except (TypeError, ValueError):
        weight = 0.0
    if not math.isfinite(weight):
        weight = 0.0
    return max(WEIGHT_EPSILON, weight)


class SeededRng:
    """Per-call generator bound to one seed.

    The object only threads a :class:`GeneratorState` through :func:`advance`;
    it is created fresh for each call and never shared. Every raw draw is kept
    (rounded to 6 places) in ``draws`` so callers can put it in a debug trace.
    """

    def __init__(self, seed: str) -> None:
        self.seed = str(seed)
        self.state = make_generator(hash32(self.seed))
        self.draws: list[float] = []

    def next01(self) -> float:
        self.state, value = advance(self.state)
        self.draws.append(round(value, 6))
        return value

    def pick(self, pool: Sequence[T]) -> T:
        if not pool:
            raise EmptyPoolError("Cannot pick from an empty pool.")
        index = math.floor(self.next01() * len(pool))
        return pool[index]

    def weighted_pick(self, pool: Sequence[T]) -> T:
        if not pool:
            raise EmptyPoolError("Cannot weighted-pick from an empty pool.")
        total = sum(_entry_weight(entry) for entry in pool)
        roll = self.next01() * total
        cursor = 0.0
        for entry in pool:
            cursor += _entry_weight(entry)
            if roll <= cursor:
                return entry
        return pool[-1]


def create_rng(seed: str) -> SeededRng:
    return SeededRng(seed)


def stable_int(seed_key: str, purpose_tag: str = "") -> int:
    return hash32(f"{seed_key}::{purpose_tag}")


def stable_float(seed_key: str, purpose_tag: str = "") -> float:
    """Single deterministic float in [0, 1) for one (seed_key, purpose_tag) decision."""
    return (stable_int(seed_key, purpose_tag) % 1_000_000) / 1_000_000


def build_narration_seed(campaign_seed: str, session_id: str, event_id: str) -> str:
    return f"{campaign_seed}::{session_id}::{event_id}"
