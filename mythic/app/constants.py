"""Centralized tuning constants and narrator word pools shared across the engine."""
from __future__ import annotations

# Weighted selection: every weight is clamped to at least this before summing
WEIGHT_EPSILON = 0.0001
TONE_WEIGHT_EPSILON = 0.001

# Spell name escalation probabilities (fixed, not configurable)
SPELL_WHIMSY_MIN_SCORE = 9
SPELL_WHIMSY_CHANCE = 0.14
SPELL_HEROIC_TAIL_CHANCE = 0.45
SPELL_MYTHIC_BRIDGE_CHANCE = 0.5
SPELL_ABSURD_SUFFIX_CHANCE = 0.45
SPELL_BASE_FALLBACK_SEED = "spell:base:fallback"

# Reputation tiers: (minimum score, tier), highest first
REPUTATION_TIER_THRESHOLDS: tuple[tuple[int, int], ...] = (
    (320, 5),
    (210, 4),
    (120, 3),
    (55, 2),
)
REPUTATION_FACTION_BANNER_MIN = 140
REPUTATION_DEFAULT_NAME = "Wanderer"

# Board narration truncation limits
BOARD_HOOK_MAX_CHARS = 72
BOARD_HOOK_MAX_COUNT = 2
BOARD_REGION_MAX_CHARS = 40
BOARD_FACTION_MAX_CHARS = 64
BOARD_CLOCK_MAX_CHARS = 52
BOARD_TYPES: tuple[str, ...] = ("town", "travel", "dungeon", "combat")

# Procedural narrator
NARRATOR_ASIDE_PICK_CHANCE = 0.1
NARRATOR_ASIDE_KEEP_CHANCE = 0.12
NARRATOR_SECONDARY_LINE_CHANCE = 0.58
NARRATOR_MAX_GUARDRAIL_RETRIES = 4
NARRATOR_MAX_STATE_CHANGE_EVENTS = 6
NARRATOR_LINES_BY_INTENSITY: dict[str, int] = {"low": 1, "med": 2, "high": 3}
NARRATOR_TAG_BONUS_TONE = 1.1
NARRATOR_TAG_BONUS_BIOME = 0.8
NARRATOR_TAG_BONUS_INTENSITY = 0.7

# Presentation state history sizes
VERB_HISTORY_LIMIT = 8

# DM voice line history: near-duplicate rejection
VOICE_HISTORY_SIZE = 20
VOICE_HISTORY_MIN = 8
VOICE_HISTORY_MAX = 64
VOICE_SIMILARITY_THRESHOLD = 0.76
VOICE_SIMILARITY_MIN = 0.55
VOICE_SIMILARITY_MAX = 0.94
VOICE_FRAGMENT_WINDOW = 3
VOICE_FRAGMENT_LIMIT = 64
VOICE_FRAGMENT_OVERLAP_REJECT = 3
VOICE_MAX_BUNDLE_LINES = 3
VOICE_RECENT_EVENTS = 12

ASIDE_LINES: tuple[str, ...] = (
    "The board keeps receipts.",
    "Bad odds are still odds.",
    "Someone upstairs is betting against you.",
    "The map never blinks first.",
    "Yes, this is the fun part.",
)

ATTACK_VERBS: tuple[str, ...] = (
    "carve",
    "slam",
    "crack",
    "hammer",
    "gouge",
    "rupture",
    "detonate",
    "cleave",
)

MOTION_VERBS: tuple[str, ...] = (
    "press",
    "angle",
    "drive",
    "cut",
    "slip",
    "pivot",
    "push",
)

FLAVOR_NOUNS: tuple[str, ...] = (
    "shockwave",
    "gash",
    "hammerfall",
    "impact lane",
    "open seam",
    "kill angle",
)

BIOME_HINTS: dict[str, tuple[str, ...]] = {
    "forest": ("wet roots", "pine-dark cover", "mossed stone"),
    "desert": ("blown grit", "sun-cut ridges", "dry thunder"),
    "swamp": ("black water", "rot haze", "reed shadows"),
    "arctic": ("frost crack", "ice glare", "white hush"),
    "city": ("iron alleys", "chimney smoke", "market noise"),
    "dungeon": ("cold masonry", "rust damp", "torch soot"),
    "default": ("dust", "stone", "pressure"),
}

# Internal/debug phrasing that must never reach the player
BANNED_PLAYER_PHRASES: tuple[str, ...] = (
    "command:unknown",
    "opening move",
    "board answers with hard state",
    "committed pressure lines",
    "commit one decisive move",
    "resolved non-player turn steps",
    "campaign_intro_opening",
)

SPECTACLE_FINISHERS: tuple[str, ...] = (
    "Heaven signs your name in lightning.",
    "The sky answers with a verdict.",
    "Reality buckles and the strike lands anyway.",
    "The field blinks white and then the damage speaks.",
)

COMBAT_FALLBACK_LINE = "Steel and spellfire trade space. Pick the next decisive move."
