"""Deterministic core: seeded random source, selection primitives, grammar helpers."""
from .grammar import article_for, compact_sentence, pluralize, third_person
from .rng import EmptyPoolError, GeneratorState, advance, create_rng, hash32, make_generator, stable_float, stable_int
from .selection import pick_deterministic, pick_deterministic_without_immediate_repeat

__all__ = [
    "article_for",
    "compact_sentence",
    "pluralize",
    "third_person",
    "EmptyPoolError",
    "GeneratorState",
    "advance",
    "create_rng",
    "hash32",
    "make_generator",
    "stable_float",
    "stable_int",
    "pick_deterministic",
    "pick_deterministic_without_immediate_repeat",
]
