"""Word-bank loader with module-level cache.

The banks live in YAML so writers can tune phrasing without touching code. An
empty or missing pool is a configuration defect and fails the load.
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from mythic.app.config import resolve_word_bank_path
from mythic.app.models.presentation import TONE_MODES, VOICE_MODES

logger = logging.getLogger(__name__)

ENEMY_VOICE_MODES: tuple[str, ...] = ("aggressive", "cunning", "chaotic", "brutal", "whimsical", "pack")
PERSONA_MODES: tuple[str, ...] = ("aggressive", "cunning", "chaotic", "brutal", "whimsical")


class WordBankError(ValueError):
    """Word-bank file is missing, unreadable, or has an empty pool."""


class WordBanks(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    spell_classic: tuple[str, ...]
    spell_classic_leads: tuple[str, ...]
    spell_enhanced: tuple[str, ...]
    spell_heroic: tuple[str, ...]
    spell_heroic_tails: tuple[str, ...]
    spell_mythic: tuple[str, ...]
    spell_mythic_bridges: tuple[str, ...]
    spell_absurd: tuple[str, ...]
    spell_absurd_suffixes: tuple[str, ...]
    spell_whimsy: tuple[str, ...]
    title_standard_classes: tuple[str, ...]
    title_whimsical_classes: tuple[str, ...]
    title_tier3_epithets: tuple[str, ...]
    title_tier4: tuple[str, ...]
    title_tier5: tuple[str, ...]
    town_syllable_a: tuple[str, ...]
    town_syllable_b: tuple[str, ...]
    board_openers: tuple[str, ...]
    narration_verbs: tuple[str, ...]
    enemy_voice: dict[str, tuple[str, ...]]
    tone_lines: dict[str, tuple[str, ...]]
    dm_voice: dict[str, tuple[str, ...]]
    dm_persona: dict[str, tuple[str, ...]]

    @field_validator("*", mode="before")
    @classmethod
    def _strip_entries(cls, v):
        if isinstance(v, list):
            return tuple(str(item).strip() for item in v if str(item).strip())
        if isinstance(v, dict):
            return {
                str(key): tuple(str(item).strip() for item in (items or []) if str(item).strip())
                for key, items in v.items()
            }
        return v

    @model_validator(mode="after")
    def _no_empty_pools(self) -> "WordBanks":
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, dict):
                continue
            if not value:
                raise ValueError(f"word bank pool '{name}' is empty")
        for mode in ENEMY_VOICE_MODES:
            if not self.enemy_voice.get(mode):
                raise ValueError(f"enemy_voice.{mode} is missing or empty")
        for tone in TONE_MODES:
            if not self.tone_lines.get(tone):
                raise ValueError(f"tone_lines.{tone} is missing or empty")
        for mode in VOICE_MODES:
            if not self.dm_voice.get(mode):
                raise ValueError(f"dm_voice.{mode} is missing or empty")
        for mode in PERSONA_MODES:
            if not self.dm_persona.get(mode):
                raise ValueError(f"dm_persona.{mode} is missing or empty")
        return self


_BANK_CACHE: dict[str, WordBanks] = {}


def load_word_banks(path: str | Path | None = None) -> WordBanks:
    """Load and validate the word banks, caching by resolved path."""
    resolved = resolve_word_bank_path(path)
    key = str(resolved.resolve())
    cached = _BANK_CACHE.get(key)
    if cached is not None:
        return cached
    try:
        raw = yaml.safe_load(resolved.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise WordBankError(f"Cannot read word banks from {resolved}: {e}") from e
    if not isinstance(raw, dict):
        raise WordBankError(f"Word bank file {resolved} must contain a mapping")
    try:
        banks = WordBanks.model_validate(raw)
    except ValidationError as e:
        raise WordBankError(f"Invalid word banks in {resolved}: {e}") from e
    logger.debug("Loaded word banks from %s", resolved)
    _BANK_CACHE[key] = banks
    return banks


def clear_word_bank_cache() -> None:
    _BANK_CACHE.clear()
