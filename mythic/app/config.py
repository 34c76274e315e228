"""Engine config: narrator mode, word-bank location, history sizes, env overrides.

Env overrides:
  MYTHIC_DM_NARRATOR_MODE               ai | procedural | hybrid (unset -> hybrid)
  MYTHIC_ALLOW_NARRATOR_QUERY_OVERRIDE  allow ?mode= overrides (dev only)
  MYTHIC_WORD_BANK_PATH                 alternate word-bank YAML
  MYTHIC_LINE_HISTORY_LIMIT             recent line hashes kept in presentation state
  MYTHIC_LOG_LEVEL                      CLI logging level
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool = False) -> bool:
    """Read boolean env flag."""
    val = os.environ.get(name, "").strip().lower()
    if not val:
        return default
    return val in ("1", "true", "yes", "on")


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default


_PACKAGE_ROOT = Path(__file__).resolve().parent
DEFAULT_WORD_BANK_PATH = _PACKAGE_ROOT / "presentation" / "data" / "word_banks.yaml"

NARRATOR_MODE_ENV = os.environ.get("MYTHIC_DM_NARRATOR_MODE", "").strip()
ALLOW_NARRATOR_QUERY_OVERRIDE = _env_flag("MYTHIC_ALLOW_NARRATOR_QUERY_OVERRIDE", default=False)


def resolve_word_bank_path(path: str | Path | None = None) -> Path:
    """
    Resolve the word-bank YAML path.

    Precedence:
    1) explicit path argument
    2) MYTHIC_WORD_BANK_PATH env var
    3) packaged presentation/data/word_banks.yaml
    """
    if path:
        return Path(path)
    env_val = os.environ.get("MYTHIC_WORD_BANK_PATH", "").strip()
    if env_val:
        return Path(env_val)
    return DEFAULT_WORD_BANK_PATH


LINE_HISTORY_LIMIT = _env_int("MYTHIC_LINE_HISTORY_LIMIT", 12)
LOG_LEVEL = os.environ.get("MYTHIC_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"


def _log_resolved_config() -> None:
    """Log resolved engine config at startup."""
    lines = ["Narrator config:"]
    lines.append(f"  narrator_mode_env={NARRATOR_MODE_ENV or 'unset'}")
    lines.append(f"  allow_query_override={ALLOW_NARRATOR_QUERY_OVERRIDE}")
    lines.append(f"  word_bank_path={resolve_word_bank_path()}")
    lines.append(f"  line_history_limit={LINE_HISTORY_LIMIT}")
    logger.info("\n".join(lines))


_log_resolved_config()
