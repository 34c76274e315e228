"""Tests for error logging and warning helpers."""
from __future__ import annotations

import logging

from mythic.app.core.error_handling import create_error_response, log_error_with_context
from mythic.app.core.warnings import add_warning


def test_log_error_with_context(caplog):
    with caplog.at_level(logging.ERROR, logger="mythic.app.core.error_handling"):
        try:
            raise KeyError("actor")
        except KeyError as e:
            log_error_with_context(e, "procedural_narrator", seed="s::1", event_id="evt", template_id="combat_hit_01")
    record = caplog.records[-1]
    assert record.component == "procedural_narrator"
    assert record.narration_seed == "s::1"
    assert record.template_id == "combat_hit_01"
    assert "seed=s::1, event_id=evt, template=combat_hit_01" in record.getMessage()
    assert record.exc_info is not None


def test_log_error_without_context(caplog):
    with caplog.at_level(logging.ERROR, logger="mythic.app.core.error_handling"):
        log_error_with_context(ValueError("bad"), "combat_lines", extra_context={"turn": 3})
    record = caplog.records[-1]
    assert "(no context)" in record.getMessage()
    assert record.turn == 3


def test_create_error_response():
    assert create_error_response("INVALID_INPUT", "bad json") == {"error_code": "INVALID_INPUT", "message": "bad json"}
    full = create_error_response("EMPTY_POOL", "empty", component="cli", details={"pool": "x"})
    assert full["component"] == "cli"
    assert full["details"] == {"pool": "x"}


def test_add_warning_dedupes_list():
    warnings: list[str] = []
    add_warning(warnings, "a")
    add_warning(warnings, "a")
    add_warning(warnings, "")
    assert warnings == ["a"]


def test_add_warning_creates_dict_container():
    payload: dict = {}
    add_warning(payload, "x")
    assert payload == {"warnings": ["x"]}


def test_add_warning_ignores_unsupported_target():
    add_warning(None, "x")
    add_warning(42, "x")


def test_add_warning_appends_to_result_model():
    from mythic.app.core.narration_mode import NarratorModeResolution

    result = NarratorModeResolution(mode="ai", source="env")
    add_warning(result, "stale_header")
    add_warning(result, "stale_header")
    assert result.warnings == ["stale_header"]
