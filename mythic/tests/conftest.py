"""Pytest setup: every test starts from the packaged word banks with an empty cache."""
from __future__ import annotations

import pytest

from mythic.app.presentation.word_banks import clear_word_bank_cache


@pytest.fixture(autouse=True)
def _fresh_word_banks(monkeypatch):
    monkeypatch.delenv("MYTHIC_WORD_BANK_PATH", raising=False)
    clear_word_bank_cache()
    yield
    clear_word_bank_cache()
