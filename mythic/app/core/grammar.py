"""Heuristic English helpers for assembled narration (no randomness)."""
from __future__ import annotations

import re

_VOWELS = ("a", "e", "i", "o", "u")
_SPACE_RX = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT_RX = re.compile(r"\s+([.,!?;:])")


def article_for(word: str) -> str:
    """
    Indefinite article for a word.

    Examples:
        >>> article_for("edge")
        'an'
        >>> article_for("gash")
        'a'
    """
    clean = (word or "").strip().lower()
    if not clean:
        return "a"
    return "an" if clean.startswith(_VOWELS) else "a"


def pluralize(word: str, count: int) -> str:
    if count == 1:
        return word
    if word.endswith("y"):
        return word[:-1] + "ies"
    if word.endswith("s"):
        return word + "es"
    return word + "s"


def third_person(verb: str) -> str:
    """Present-tense third person singular: slam -> slams, crash -> crashes, carry -> carries."""
    if verb.endswith("y"):
        return verb[:-1] + "ies"
    if verb.endswith(("s", "x", "ch", "sh")):
        return verb + "es"
    return verb + "s"


def compact_sentence(text: str) -> str:
    """Trim, collapse whitespace runs and drop whitespace before punctuation. Idempotent."""
    clean = _SPACE_RX.sub(" ", (text or "").strip())
    return _SPACE_BEFORE_PUNCT_RX.sub(r"\1", clean).strip()


def compact_text(text: str, max_len: int = 120) -> str:
    """Whitespace-normalise and truncate at a word boundary, appending ``...`` when cut."""
    clean = _SPACE_RX.sub(" ", (text or "").strip())
    if not clean:
        return ""
    if len(clean) <= max_len:
        return clean
    head = re.sub(r"\s+\S*$", "", clean[:max_len]).strip()
    return f"{head}..."


def concise_count_label(label: str, count: int) -> str:
    return f"{count} {pluralize(label, count)}"
