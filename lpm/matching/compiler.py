from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping

from lpm.errors import ConfigError

from .models import (
    CombinedLocation,
    DiscreteLocation,
    FileLocation,
    MatcherDefinition,
    PatternStep,
    StepKind,
)

log = logging.getLogger(__name__)

# Settings keys holding capture-group indices.
_INDEX_KEYS: tuple[str, ...] = (
    "severity",
    "code",
    "file",
    "location",
    "line",
    "endLine",
    "column",
    "endColumn",
    "message",
)


def compile_matcher(raw: Mapping[str, Any], index: int = 0) -> MatcherDefinition:
    """Compile one matcher definition from its settings mapping.

    ``pattern`` may hold a single step mapping or a list of them; either way
    the result carries a non-empty tuple of compiled steps.  Raises
    :class:`ConfigError` for anything that would leave the matcher unusable.
    """
    title = raw.get("title") or f"Matcher {index}"

    raw_pattern = raw.get("pattern")
    if isinstance(raw_pattern, Mapping):
        raw_steps: list[Any] = [raw_pattern]
    elif isinstance(raw_pattern, list):
        raw_steps = list(raw_pattern)
    else:
        raise ConfigError("'pattern' must be a table or a list of tables", title)
    if not raw_steps:
        raise ConfigError("'pattern' must contain at least one step", title)

    steps = tuple(_compile_step(s, i, title) for i, s in enumerate(raw_steps))

    severity = raw.get("severity") or None
    if severity is not None and not isinstance(severity, str):
        raise ConfigError("'severity' must be a string", title)

    matcher = MatcherDefinition(
        title=title,
        steps=steps,
        severity=severity,
        source=raw.get("source") or None,
        file_location=_file_location(raw.get("fileLocation"), title),
        link_to_log_file=bool(raw.get("linkToLogFile")),
        location_zero_based=bool(raw.get("problemLocationZeroBased", False)),
        line_zero_based=bool(raw.get("problemLineZeroBased", False)),
        column_zero_based=bool(raw.get("problemColumnZeroBased", False)),
        error_string=_indicators(raw, "error_string", title),
        warning_string=_indicators(raw, "warning_string", title),
        info_string=_indicators(raw, "info_string", title),
        default_selected=raw.get("defaultSelected", True) is not False,
    )

    if matcher.severity is None and all(s.severity is None for s in steps):
        log.warning(
            "Matcher %r has no 'severity' override and no severity capture; "
            "its problems will be reported as hints",
            title,
        )
    return matcher


def compile_matchers(raws: Iterable[Mapping[str, Any]]) -> list[MatcherDefinition]:
    """Compile every definition, leaving out (and logging) the broken ones."""
    compiled: list[MatcherDefinition] = []
    for idx, raw in enumerate(raws):
        try:
            compiled.append(compile_matcher(raw, idx))
        except ConfigError as exc:
            log.warning("Skipping matcher: %s", exc)
    return compiled


def _compile_step(raw: Any, position: int, title: str) -> PatternStep:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"pattern step {position} must be a table", title)

    source = raw.get("regexp")
    if not isinstance(source, str) or not source:
        raise ConfigError(
            f"pattern step {position} is missing its 'regexp' property", title
        )
    try:
        regexp = re.compile(source)
    except re.error as exc:
        raise ConfigError(
            f"pattern step {position} has an invalid regexp {source!r}: {exc}",
            title,
        ) from exc

    idx = {key: _capture_index(raw, key, position, title) for key in _INDEX_KEYS}
    for key, value in idx.items():
        if value is not None and value > regexp.groups:
            raise ConfigError(
                f"pattern step {position} maps '{key}' to group {value} "
                f"but the regexp only has {regexp.groups}",
                title,
            )

    if idx["location"] is not None:
        location: CombinedLocation | DiscreteLocation = CombinedLocation(
            idx["location"]
        )
    else:
        location = DiscreteLocation(
            line=idx["line"],
            end_line=idx["endLine"],
            column=idx["column"],
            end_column=idx["endColumn"],
        )

    kind = raw.get("kind", StepKind.LOCATION.value)
    try:
        step_kind = StepKind(kind)
    except ValueError:
        raise ConfigError(
            f"pattern step {position} has unknown kind {kind!r}", title
        ) from None

    return PatternStep(
        regexp=regexp,
        severity=idx["severity"],
        code=idx["code"],
        file=idx["file"],
        message=idx["message"],
        location=location,
        error_string=_indicators(raw, "error_string", title),
        warning_string=_indicators(raw, "warning_string", title),
        info_string=_indicators(raw, "info_string", title),
        kind=step_kind,
        loop=bool(raw.get("loop", False)),
    )


def _capture_index(
    raw: Mapping[str, Any], key: str, position: int, title: str
) -> int | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(
            f"pattern step {position}: '{key}' must be a capture group number",
            title,
        )
    return value


def _indicators(raw: Mapping[str, Any], key: str, title: str) -> tuple[str, ...] | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ConfigError(f"'{key}' must be a string or a list of strings", title)


def _file_location(value: Any, title: str) -> FileLocation:
    if value is None or value == "absolute":
        return FileLocation()
    if isinstance(value, str):
        value = [value]
    if isinstance(value, list) and value and value[0] in ("absolute", "relative"):
        if value[0] == "relative":
            if len(value) < 2 or not isinstance(value[1], str):
                raise ConfigError(
                    "relative 'fileLocation' needs a base path", title
                )
            return FileLocation("relative", value[1])
        return FileLocation()
    raise ConfigError(f"unsupported 'fileLocation' {value!r}", title)
