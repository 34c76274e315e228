"""JSON in/out helpers shared by the mythicdm commands."""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any


def print_json(payload: Any, pretty: bool = False) -> None:
    print(json.dumps(payload, indent=2 if pretty else None, ensure_ascii=False))


def read_json_input(path: str | None) -> Any:
    """Parse JSON from ``path``, or stdin when path is missing or ``-``."""
    if not path or path == "-":
        return json.loads(sys.stdin.read())
    return json.loads(Path(path).read_text(encoding="utf-8"))
