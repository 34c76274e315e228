"""Warning collection for engine results (mode resolution, CLI payloads)."""
from __future__ import annotations

from typing import Any, MutableMapping


def _warning_list(target: Any) -> list[str] | None:
    if isinstance(target, list):
        return target
    if isinstance(target, MutableMapping):
        return target.setdefault("warnings", [])
    existing = getattr(target, "warnings", None)
    return existing if isinstance(existing, list) else None


def add_warning(target: Any, message: str) -> None:
    """Append ``message`` once to a list, a dict's ``warnings`` key, or a result's ``warnings`` field."""
    if not message:
        return
    warnings = _warning_list(target)
    if warnings is not None and message not in warnings:
        warnings.append(message)
