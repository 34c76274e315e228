"""``mythicdm narrate``: narrate one turn from a JSON input and print the full result."""
from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from mythic.app.core.error_handling import create_error_response
from mythic.app.core.procedural import generate_procedural_narration
from mythic.app.models.narration import ProceduralNarratorInput
from mythicdm.commands.output import print_json, read_json_input

logger = logging.getLogger(__name__)


def register(subparsers) -> None:
    p = subparsers.add_parser("narrate", help="Narrate one turn from a JSON input (file or stdin)")
    p.add_argument("input", nargs="?", default="-", help="Path to narrator input JSON ('-' for stdin)")
    p.add_argument("--text-only", action="store_true", help="Print only the narration text")
    p.add_argument("--pretty", action="store_true", help="Indent JSON output")
    p.set_defaults(func=run)


def run(args) -> int:
    try:
        raw = read_json_input(args.input)
    except (OSError, json.JSONDecodeError) as e:
        print_json(create_error_response("INVALID_INPUT", f"Cannot read narrator input: {e}", component="narrate"))
        return 1
    try:
        data = ProceduralNarratorInput.model_validate(raw)
    except ValidationError as e:
        print_json(
            create_error_response(
                "INVALID_INPUT",
                "Narrator input failed validation",
                component="narrate",
                details={"errors": e.errors(include_url=False, include_context=False)},
            )
        )
        return 1

    result = generate_procedural_narration(data)
    logger.debug("Narrated %s with template %s", result.debug.seed, result.template_id)
    if args.text_only:
        print(result.text)
    else:
        print_json(result.model_dump(mode="json"), pretty=args.pretty)
    return 0
