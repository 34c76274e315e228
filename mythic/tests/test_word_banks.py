"""Tests for the word-bank loader."""
from __future__ import annotations

import pytest
import yaml

from mythic.app.config import DEFAULT_WORD_BANK_PATH
from mythic.app.models.presentation import VOICE_MODES
from mythic.app.presentation.word_banks import WordBankError, load_word_banks


def _raw_banks() -> dict:
    return yaml.safe_load(DEFAULT_WORD_BANK_PATH.read_text(encoding="utf-8"))


def _write(tmp_path, data, name="banks.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_packaged_banks_load():
    banks = load_word_banks()
    assert banks.spell_classic
    assert set(banks.tone_lines) >= {"tactical", "mythic", "whimsical", "brutal", "minimalist"}


def test_cached_by_path():
    assert load_word_banks() is load_word_banks()


def test_entries_are_stripped_and_blanks_dropped(tmp_path):
    data = _raw_banks()
    data["spell_classic"] = ["  Fireball ", "", "   "]
    banks = load_word_banks(_write(tmp_path, data))
    assert banks.spell_classic == ("Fireball",)


def test_empty_pool_rejected(tmp_path):
    data = _raw_banks()
    data["board_openers"] = []
    with pytest.raises(WordBankError, match="board_openers"):
        load_word_banks(_write(tmp_path, data))


def test_missing_pool_rejected(tmp_path):
    data = _raw_banks()
    del data["title_tier5"]
    with pytest.raises(WordBankError):
        load_word_banks(_write(tmp_path, data))


def test_missing_enemy_voice_mode_rejected(tmp_path):
    data = _raw_banks()
    del data["enemy_voice"]["pack"]
    with pytest.raises(WordBankError, match="enemy_voice.pack"):
        load_word_banks(_write(tmp_path, data))


def test_missing_dm_voice_mode_rejected(tmp_path):
    data = _raw_banks()
    data["dm_voice"]["blessing"] = []
    with pytest.raises(WordBankError, match="dm_voice.blessing"):
        load_word_banks(_write(tmp_path, data))


def test_packaged_voice_pools_cover_every_mode():
    banks = load_word_banks()
    assert set(banks.dm_voice) >= set(VOICE_MODES)
    assert set(banks.dm_persona) >= {"aggressive", "cunning", "chaotic", "brutal", "whimsical"}


def test_unknown_key_rejected(tmp_path):
    data = _raw_banks()
    data["spell_extra"] = ["Nope"]
    with pytest.raises(WordBankError):
        load_word_banks(_write(tmp_path, data))


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- one\n- two\n", encoding="utf-8")
    with pytest.raises(WordBankError, match="mapping"):
        load_word_banks(path)


def test_missing_file_rejected(tmp_path):
    with pytest.raises(WordBankError, match="Cannot read"):
        load_word_banks(tmp_path / "absent.yaml")


def test_env_path_override(tmp_path, monkeypatch):
    data = _raw_banks()
    data["spell_classic"] = ["Pebble Toss"]
    path = _write(tmp_path, data)
    monkeypatch.setenv("MYTHIC_WORD_BANK_PATH", str(path))
    assert load_word_banks().spell_classic == ("Pebble Toss",)


def test_word_bank_error_is_value_error():
    assert issubclass(WordBankError, ValueError)
