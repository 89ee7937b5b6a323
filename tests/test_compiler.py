from __future__ import annotations

import logging

import pytest

from lpm.errors import ConfigError
from lpm.matching import (
    CombinedLocation,
    DiscreteLocation,
    FileLocation,
    StepKind,
    compile_matcher,
    compile_matchers,
)


# ── Step normalisation ────────────────────────────────────────────


def test_lone_pattern_becomes_single_step() -> None:
    m = compile_matcher({"title": "T", "pattern": {"regexp": r"^E: (.*)$", "message": 1}})
    assert len(m.steps) == 1
    assert m.steps[0].message == 1
    assert m.steps[0].regexp.search("E: boom") is not None


def test_pattern_list_keeps_order() -> None:
    m = compile_matcher(
        {
            "pattern": [
                {"regexp": r"^first$"},
                {"regexp": r"^second (.*)$", "message": 1, "loop": True},
            ]
        }
    )
    assert [s.regexp.pattern for s in m.steps] == [r"^first$", r"^second (.*)$"]
    assert m.steps[1].loop is True
    assert m.last_index == 1


def test_missing_title_uses_position() -> None:
    m = compile_matcher({"pattern": {"regexp": "x"}}, index=3)
    assert m.title == "Matcher 3"


def test_location_index_selects_combined_mode() -> None:
    m = compile_matcher({"pattern": {"regexp": r"\((.*)\)", "location": 1}})
    assert m.steps[0].location == CombinedLocation(1)


def test_discrete_indices_are_kept() -> None:
    m = compile_matcher(
        {"pattern": {"regexp": r"(\d+):(\d+)", "line": 1, "column": 2}}
    )
    assert m.steps[0].location == DiscreteLocation(line=1, column=2)


def test_indicator_strings_normalised_to_tuples() -> None:
    m = compile_matcher(
        {
            "error_string": "E",
            "warning_string": ["W", "WARN"],
            "pattern": {"regexp": "(.)", "severity": 1},
        }
    )
    assert m.error_string == ("E",)
    assert m.warning_string == ("W", "WARN")
    assert m.info_string is None


def test_file_kind_parsed() -> None:
    m = compile_matcher({"pattern": {"regexp": "(.*)", "kind": "file", "file": 1}})
    assert m.steps[0].kind is StepKind.FILE


def test_relative_file_location() -> None:
    m = compile_matcher(
        {"fileLocation": ["relative", "/base"], "pattern": {"regexp": "x"}}
    )
    assert m.file_location == FileLocation("relative", "/base")
    assert m.file_location.is_relative


def test_default_selected_only_false_deselects() -> None:
    assert compile_matcher({"pattern": {"regexp": "x"}}).default_selected is True
    assert (
        compile_matcher({"defaultSelected": False, "pattern": {"regexp": "x"}}).default_selected
        is False
    )


def test_source_label() -> None:
    assert compile_matcher({"pattern": {"regexp": "x"}}).source_label == "LPM"
    assert compile_matcher({"source": "gcc", "pattern": {"regexp": "x"}}).source_label == "LPM-gcc"


# ── Configuration errors ──────────────────────────────────────────


def test_missing_regexp_is_config_error() -> None:
    with pytest.raises(ConfigError, match="regexp"):
        compile_matcher({"title": "bad", "pattern": [{"regexp": "ok"}, {"message": 1}]})


def test_missing_pattern_is_config_error() -> None:
    with pytest.raises(ConfigError):
        compile_matcher({"title": "bad"})


def test_empty_pattern_list_is_config_error() -> None:
    with pytest.raises(ConfigError):
        compile_matcher({"title": "bad", "pattern": []})


def test_invalid_regexp_is_config_error() -> None:
    with pytest.raises(ConfigError, match="invalid regexp"):
        compile_matcher({"pattern": {"regexp": "(unclosed"}})


def test_group_out_of_range_is_config_error() -> None:
    with pytest.raises(ConfigError, match="group 3"):
        compile_matcher({"pattern": {"regexp": "(a)(b)", "message": 3}})


def test_non_integer_index_is_config_error() -> None:
    with pytest.raises(ConfigError):
        compile_matcher({"pattern": {"regexp": "(a)", "message": "1"}})


def test_unknown_kind_is_config_error() -> None:
    with pytest.raises(ConfigError, match="kind"):
        compile_matcher({"pattern": {"regexp": "a", "kind": "folder"}})


def test_relative_location_without_base_is_config_error() -> None:
    with pytest.raises(ConfigError):
        compile_matcher({"fileLocation": ["relative"], "pattern": {"regexp": "a"}})


def test_config_error_names_matcher() -> None:
    with pytest.raises(ConfigError) as info:
        compile_matcher({"title": "Linker", "pattern": {}})
    assert info.value.matcher == "Linker"
    assert "Linker" in str(info.value)


# ── Batch compilation ─────────────────────────────────────────────


def test_compile_matchers_skips_broken(caplog: pytest.LogCaptureFixture) -> None:
    raws = [
        {"title": "good", "severity": "error", "pattern": {"regexp": "a"}},
        {"title": "broken", "pattern": {"message": 1}},
        {"title": "also good", "severity": "info", "pattern": {"regexp": "b"}},
    ]
    with caplog.at_level(logging.WARNING, logger="lpm"):
        compiled = compile_matchers(raws)
    assert [m.title for m in compiled] == ["good", "also good"]
    assert "broken" in caplog.text


def test_indicator_strings_must_be_strings() -> None:
    with pytest.raises(ConfigError, match="error_string"):
        compile_matcher({"title": "bad", "error_string": 5, "pattern": {"regexp": "(x)", "severity": 1}})
    with pytest.raises(ConfigError, match="warning_string"):
        compile_matcher({"title": "bad", "pattern": {"regexp": "(x)", "severity": 1, "warning_string": ["w", 2]}})


def test_compile_matchers_skips_bad_indicator_strings() -> None:
    raws = [
        {"title": "bad", "error_string": 5, "pattern": {"regexp": "(x)", "severity": 1}},
        {"title": "good", "severity": "error", "pattern": {"regexp": "x"}},
    ]
    assert [m.title for m in compile_matchers(raws)] == ["good"]


def test_missing_severity_source_warns_once(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="lpm"):
        compile_matcher({"title": "quiet", "pattern": {"regexp": "(.*)", "message": 1}})
    warnings = [r for r in caplog.records if "quiet" in r.getMessage()]
    assert len(warnings) == 1


def test_severity_capture_does_not_warn(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="lpm"):
        compile_matcher({"title": "loud", "pattern": {"regexp": "(.*)", "severity": 1}})
    assert caplog.records == []
