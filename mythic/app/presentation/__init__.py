"""Presentation engines: board intros, spell names, titles, spectacle, combat lines and DM voice."""
from mythic.app.presentation.board_narration import build_board_narration
from mythic.app.presentation.combat_lines import build_narrative_lines_from_events
from mythic.app.presentation.enemy_personality import default_enemy_traits, personality_line
from mythic.app.presentation.reputation import build_reputation_title
from mythic.app.presentation.spectacle import build_spectacle_line
from mythic.app.presentation.spell_names import build_spell_name
from mythic.app.presentation.tone_rotation import select_tone_mode, tone_seed_line
from mythic.app.presentation.voice_engine import (
    build_dm_voice_profile,
    build_voice_narration_bundle,
    create_line_history,
    select_voice_mode,
    should_reject_line,
)
from mythic.app.presentation.word_banks import WordBankError, load_word_banks

__all__ = [
    "build_board_narration",
    "build_narrative_lines_from_events",
    "default_enemy_traits",
    "personality_line",
    "build_reputation_title",
    "build_spectacle_line",
    "build_spell_name",
    "select_tone_mode",
    "tone_seed_line",
    "build_dm_voice_profile",
    "build_voice_narration_bundle",
    "create_line_history",
    "select_voice_mode",
    "should_reject_line",
    "WordBankError",
    "load_word_banks",
]
