"""Post-render check for internal or debug phrasing leaking into player text (no RNG)."""
from __future__ import annotations

import re

from mythic.app.constants import BANNED_PLAYER_PHRASES

# Unrendered placeholders like "{actor}" or stringified nulls
_LEAK_PATTERNS = (
    re.compile(r"\{[a-z_]+\}"),
    re.compile(r"\b(?:undefined|NaN)\b"),
)


def find_forbidden_phrases(text: str) -> list[str]:
    lowered = (text or "").lower()
    hits = [phrase for phrase in BANNED_PLAYER_PHRASES if phrase in lowered]
    hits.extend(p.pattern for p in _LEAK_PATTERNS if p.search(text or ""))
    return hits


def has_forbidden_narration_content(text: str) -> bool:
    return bool(find_forbidden_phrases(text))
