"""Tests for the board narration composer."""
from __future__ import annotations

import re

from mythic.app.models.presentation import BoardNarrationInput
from mythic.app.presentation.board_narration import (
    DUNGEON_FALLBACK_LINE,
    TRAVEL_FALLBACK_LINE,
    build_board_narration,
    town_tag,
)
from mythic.app.presentation.word_banks import load_word_banks


def _board(**overrides):
    data = {"seed_key": "camp::board", "board_type": "town"}
    data.update(overrides)
    return build_board_narration(BoardNarrationInput(**data))


def _second_line(result) -> str:
    assert result.text.startswith(result.opener_id)
    return result.text[len(result.opener_id):].strip()


class TestTownBoard:
    def test_district_line_without_context(self):
        result = _board()
        second = _second_line(result)
        assert re.fullmatch(r"District: \w+\.", second)

    def test_district_tag_reproducible(self):
        assert _board().text == _board().text
        assert town_tag("camp::board") == town_tag("camp::board")

    def test_district_tag_built_from_syllables(self):
        banks = load_word_banks()
        tag = town_tag("any-seed")
        head = next(a for a in banks.town_syllable_a if tag.startswith(a))
        assert tag[len(head):] in banks.town_syllable_b

    def test_region_name_wins_over_generated_tag(self):
        result = _board(region_name="  Old   Harbor ")
        assert _second_line(result) == "District: Old Harbor."

    def test_hook_wins(self):
        result = _board(hooks=["Find the bell", "Second hook"], faction_tension="Guilds at odds")
        assert _second_line(result) == "Lead: Find the bell."

    def test_faction_tension_before_clock(self):
        result = _board(faction_tension="Guilds at odds", time_pressure="Dusk")
        assert _second_line(result) == "Faction pressure: Guilds at odds."

    def test_clock_when_no_faction(self):
        result = _board(time_pressure="Bells at dusk")
        assert _second_line(result) == "Clock: Bells at dusk."

    def test_long_hook_is_truncated(self):
        hook = "word " * 40
        result = _board(hooks=[hook])
        second = _second_line(result)
        assert second.startswith("Lead: ")
        assert second.endswith("....")
        assert len(second) <= len("Lead: ") + 72 + 4

    def test_blank_hooks_ignored(self):
        result = _board(hooks=["   ", ""], time_pressure="Dusk")
        assert _second_line(result) == "Clock: Dusk."


class TestOtherBoards:
    def test_travel_hook(self):
        result = _board(board_type="travel", hooks=["Caravan at the ford"])
        assert _second_line(result) == "Route lead: Caravan at the ford."

    def test_travel_clock(self):
        result = _board(board_type="travel", time_pressure="Storm in two turns")
        assert _second_line(result) == "Clock: Storm in two turns."

    def test_travel_fallback(self):
        assert _second_line(_board(board_type="travel")) == TRAVEL_FALLBACK_LINE

    def test_dungeon_hook(self):
        result = _board(board_type="dungeon", hooks=["The crypt door hums"])
        assert _second_line(result) == "Stone hook: The crypt door hums."

    def test_dungeon_resources(self):
        result = _board(board_type="dungeon", resource_window="two torches left")
        assert _second_line(result) == "Resources: two torches left."

    def test_dungeon_fallback(self):
        assert _second_line(_board(board_type="dungeon")) == DUNGEON_FALLBACK_LINE

    def test_combat_is_opener_only(self):
        result = _board(board_type="combat", hooks=["ignored"])
        assert result.text == result.opener_id

    def test_unknown_board_type_treated_as_combat(self):
        result = build_board_narration({"seed_key": "s", "board_type": "volcano"})
        assert result.text == result.opener_id


def test_opener_comes_from_pool():
    assert _board().opener_id in load_word_banks().board_openers


def test_opener_never_repeats_last():
    openers = load_word_banks().board_openers
    for last in openers:
        for i in range(15):
            result = _board(seed_key=f"seed-{i}", last_opener_id=last)
            assert result.opener_id != last


def test_text_is_whitespace_normalized():
    result = _board(hooks=["  spaced    out   hook  "])
    assert "  " not in result.text
    assert result.text == result.text.strip()


def test_accepts_mapping_input():
    as_model = _board()
    as_dict = build_board_narration({"seed_key": "camp::board", "board_type": "town"})
    assert as_model == as_dict
