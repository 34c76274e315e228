"""Procedural narrator: event mapping, template registry, guardrails, orchestration."""
from mythic.app.core.procedural.event_mapper import classify_event_type, map_procedural_events
from mythic.app.core.procedural.guardrails import has_forbidden_narration_content
from mythic.app.core.procedural.narrator import generate_procedural_narration
from mythic.app.core.procedural.templates import DEFAULT_TEMPLATES, PROCEDURAL_TEMPLATES, Template

__all__ = [
    "classify_event_type",
    "map_procedural_events",
    "has_forbidden_narration_content",
    "generate_procedural_narration",
    "DEFAULT_TEMPLATES",
    "PROCEDURAL_TEMPLATES",
    "Template",
]
