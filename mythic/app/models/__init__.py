"""Engine models (narration events, narrator input/output, presentation payloads, DM voice)."""
from .narration import (
    DmNarrationContext,
    NarrationEvent,
    NarrationEventType,
    NarratorDebug,
    ProceduralIntensity,
    ProceduralNarratorInput,
    ProceduralNarratorResult,
    ProceduralTone,
)
from .presentation import (
    BoardNarrationInput,
    BoardNarrationResult,
    CombatPresentationEvent,
    DmVoiceProfile,
    EnemyPersonalityTraits,
    LineHistoryBuffer,
    NarrativeLinesResult,
    PresentationState,
    ReputationInput,
    ReputationResult,
    SpellPresentationMeta,
    SpellStyleTags,
    ToneMode,
    ToneSelectionInput,
    ToneSelectionResult,
    VoiceBundle,
    VoiceMode,
)

__all__ = [
    "DmNarrationContext",
    "NarrationEvent",
    "NarrationEventType",
    "NarratorDebug",
    "ProceduralIntensity",
    "ProceduralNarratorInput",
    "ProceduralNarratorResult",
    "ProceduralTone",
    "BoardNarrationInput",
    "BoardNarrationResult",
    "CombatPresentationEvent",
    "DmVoiceProfile",
    "EnemyPersonalityTraits",
    "LineHistoryBuffer",
    "NarrativeLinesResult",
    "PresentationState",
    "ReputationInput",
    "ReputationResult",
    "SpellPresentationMeta",
    "SpellStyleTags",
    "ToneMode",
    "ToneSelectionInput",
    "ToneSelectionResult",
    "VoiceBundle",
    "VoiceMode",
]
