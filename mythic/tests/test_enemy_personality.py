"""Tests for enemy voice lines."""
from __future__ import annotations

import pytest

from mythic.app.models.presentation import INSTINCT_TYPES, EnemyPersonalityTraits
from mythic.app.presentation.enemy_personality import (
    default_enemy_traits,
    normalize_enemy_traits,
    personality_line,
    personality_mode,
)
from mythic.app.presentation.word_banks import load_word_banks


@pytest.mark.parametrize(
    "traits,tone,mode",
    [
        ({"instinct_type": "pack", "intelligence": 90}, "tactical", "pack"),
        ({"instinct_type": "chaotic"}, "whimsical", "chaotic"),
        ({}, "whimsical", "whimsical"),
        ({"aggression": 80, "intelligence": 30}, "tactical", "aggressive"),
        ({"intelligence": 70}, "tactical", "cunning"),
        ({"discipline": 70}, "brutal", "cunning"),
        ({"aggression": 66}, "tactical", "brutal"),
        ({}, "tactical", "aggressive"),
    ],
)
def test_personality_mode(traits, tone, mode):
    assert personality_mode(EnemyPersonalityTraits(**traits), tone) == mode


def test_traits_are_clamped_and_coerced():
    traits = normalize_enemy_traits({"aggression": 150, "discipline": -3, "intelligence": "nan", "instinct_type": "weird"})
    assert traits.aggression == 100
    assert traits.discipline == 0
    assert traits.intelligence == 50
    assert traits.instinct_type == "predator"


def test_missing_traits_use_defaults():
    assert normalize_enemy_traits(None) == EnemyPersonalityTraits()


def test_line_comes_from_mode_pool():
    voice = load_word_banks().enemy_voice
    line = personality_line("enemy-7", {"instinct_type": "pack"}, "tactical")
    assert line in voice["pack"]


def test_line_is_deterministic():
    traits = {"aggression": 80, "intelligence": 20}
    assert personality_line("s", traits, "brutal") == personality_line("s", traits, "brutal")


def test_default_traits_stable_and_in_range():
    first = default_enemy_traits("goblin-3")
    assert first == default_enemy_traits("goblin-3")
    assert 30 <= first.aggression <= 81
    assert first.instinct_type in INSTINCT_TYPES
