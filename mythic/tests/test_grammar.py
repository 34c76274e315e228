"""Tests for heuristic English helpers."""
from __future__ import annotations

import pytest

from mythic.app.core.grammar import (
    article_for,
    compact_sentence,
    compact_text,
    concise_count_label,
    pluralize,
    third_person,
)


@pytest.mark.parametrize(
    "word,expected",
    [("edge", "an"), ("Omen", "an"), ("  ice", "an"), ("gash", "a"), ("", "a"), ("unicorn", "an")],
)
def test_article_for(word, expected):
    assert article_for(word) == expected


@pytest.mark.parametrize(
    "word,count,expected",
    [
        ("event", 1, "event"),
        ("event", 3, "events"),
        ("story", 2, "stories"),
        ("boss", 2, "bosses"),
        ("event", 0, "events"),
    ],
)
def test_pluralize(word, count, expected):
    assert pluralize(word, count) == expected


@pytest.mark.parametrize(
    "verb,expected",
    [
        ("slam", "slams"),
        ("carry", "carries"),
        ("press", "presses"),
        ("box", "boxes"),
        ("crunch", "crunches"),
        ("crash", "crashes"),
        ("strike", "strikes"),
    ],
)
def test_third_person(verb, expected):
    assert third_person(verb) == expected


def test_compact_sentence_collapses_and_fixes_punctuation():
    assert compact_sentence("  Kael   hits  the goblin .  Again !") == "Kael hits the goblin. Again!"


@pytest.mark.parametrize(
    "text",
    ["", "   ", "a  b", "x , y ; z", "Done .", "\tTabs\nand newlines ?", "ok"],
)
def test_compact_sentence_is_idempotent(text):
    once = compact_sentence(text)
    assert compact_sentence(once) == once


def test_compact_text_keeps_short_text():
    assert compact_text("  short   hook ", 72) == "short hook"


def test_compact_text_truncates_at_word_boundary():
    out = compact_text("alpha beta gamma delta", 12)
    assert out.endswith("...")
    assert out.startswith("alpha")
    assert " gam" not in out


def test_compact_text_blank():
    assert compact_text("   ", 10) == ""


def test_concise_count_label():
    assert concise_count_label("event", 1) == "1 event"
    assert concise_count_label("event", 4) == "4 events"
