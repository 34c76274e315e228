"""Narrator mode resolution: which narrator (ai, procedural, hybrid) serves a request."""
from __future__ import annotations

import logging
from typing import Literal, Optional

from pydantic import BaseModel, Field

from mythic.app import config
from mythic.app.core.warnings import add_warning

logger = logging.getLogger(__name__)

NarratorMode = Literal["ai", "procedural", "hybrid"]
NARRATOR_MODES: tuple[str, ...] = ("ai", "procedural", "hybrid")
DEFAULT_NARRATOR_MODE: NarratorMode = "hybrid"


class NarratorModeResolution(BaseModel):
    mode: NarratorMode
    source: Literal["env", "header", "query", "default"]
    warnings: list[str] = Field(default_factory=list)


def normalize_narrator_mode(value: Optional[str]) -> Optional[str]:
    key = (value or "").strip().lower()
    return key if key in NARRATOR_MODES else None


def resolve_narrator_mode(
    env_mode: Optional[str] = None,
    header_mode: Optional[str] = None,
    query_mode: Optional[str] = None,
    allow_query_override: Optional[bool] = None,
) -> NarratorModeResolution:
    """
    Resolve the narrator mode for one request.

    Precedence: query (only when overrides are allowed) > header > env > hybrid.
    ``env_mode`` and ``allow_query_override`` default to the process config.
    Invalid values never fail the request; they are reported as warnings.
    """
    if env_mode is None:
        env_mode = config.NARRATOR_MODE_ENV
    if allow_query_override is None:
        allow_query_override = config.ALLOW_NARRATOR_QUERY_OVERRIDE

    warnings: list[str] = []
    env = normalize_narrator_mode(env_mode)
    header = normalize_narrator_mode(header_mode)
    query = normalize_narrator_mode(query_mode)

    if env_mode and not env:
        add_warning(warnings, f"invalid_env_mode:{env_mode.strip()}")
    if header_mode and not header:
        add_warning(warnings, f"invalid_header_mode:{header_mode.strip()}")
    if query_mode and not query:
        add_warning(warnings, f"invalid_query_mode:{query_mode.strip()}")
    if query_mode and not allow_query_override:
        add_warning(warnings, "query_override_ignored_in_production")

    if warnings:
        logger.warning("Narrator mode resolution warnings: %s", ", ".join(warnings))

    if query and allow_query_override:
        return NarratorModeResolution(mode=query, source="query", warnings=warnings)
    if header:
        return NarratorModeResolution(mode=header, source="header", warnings=warnings)
    if env:
        return NarratorModeResolution(mode=env, source="env", warnings=warnings)
    return NarratorModeResolution(mode=DEFAULT_NARRATOR_MODE, source="default", warnings=warnings)
