"""Error handling utilities: structured logging and error responses."""
from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


def log_error_with_context(
    error: Exception,
    component: str,
    seed: str | None = None,
    event_id: str | None = None,
    template_id: str | None = None,
    extra_context: dict[str, Any] | None = None,
) -> None:
    """
    Log an error with full context: seed, event id, template id, and stack trace.

    Args:
        error: The exception that occurred
        component: Engine component (e.g., 'procedural_narrator', 'combat_lines')
        seed: Turn seed for replay
        event_id: Narration event id being rendered
        template_id: Template that was rendering when the error happened
        extra_context: Additional context dict to include in log
    """
    context_parts = []
    if seed:
        context_parts.append(f"seed={seed}")
    if event_id:
        context_parts.append(f"event_id={event_id}")
    if template_id:
        context_parts.append(f"template={template_id}")
    context_str = ", ".join(context_parts) if context_parts else "no context"

    extra = {}
    if extra_context:
        extra.update(extra_context)
    if seed:
        extra["narration_seed"] = seed
    if event_id:
        extra["event_id"] = event_id
    if template_id:
        extra["template_id"] = template_id
    extra["component"] = component

    logger.error(
        f"[{component}] Error: {type(error).__name__}: {str(error)} ({context_str})",
        exc_info=True,
        extra=extra,
    )


def create_error_response(
    error_code: str,
    message: str,
    component: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Create a structured error payload for callers of the engine (CLI, turn orchestrator).

    Args:
        error_code: Error code (e.g., 'EMPTY_POOL', 'INVALID_INPUT')
        message: Human-readable error message
        component: Engine component where the error occurred
        details: Additional error details

    Returns:
        Structured error dict
    """
    response: dict[str, Any] = {
        "error_code": error_code,
        "message": message,
    }
    if component:
        response["component"] = component
    if details:
        response["details"] = details
    return response
