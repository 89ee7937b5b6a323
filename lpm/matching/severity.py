from __future__ import annotations

import re
from dataclasses import dataclass

from .models import MatcherDefinition, PatternStep, Severity

# Checked in this order; the first category containing the capture wins.
_CATEGORIES: tuple[tuple[str, Severity], ...] = (
    ("error", Severity.ERROR),
    ("warning", Severity.WARNING),
    ("info", Severity.INFORMATION),
)

_OVERRIDES: dict[str, Severity] = dict(_CATEGORIES)


@dataclass(frozen=True, slots=True)
class Indicators:
    """Strings that select one severity category."""

    strings: frozenset[str]
    # Set for the built-in single-word default, which ignores case.
    case_insensitive: bool = False

    def matches(self, captured: str) -> bool:
        if self.case_insensitive:
            captured = captured.lower()
        return captured in self.strings


SeverityIndicatorSet = dict[str, Indicators]


def build_indicator_set(matcher: MatcherDefinition) -> SeverityIndicatorSet:
    """Collect the indicator strings for each severity category.

    Matcher-level strings take precedence, then those of the matcher's
    *first* step.  Strings declared on later steps are never consulted.
    """
    first = matcher.steps[0]
    configured = {
        "error": _first_set(matcher.error_string, first.error_string),
        "warning": _first_set(matcher.warning_string, first.warning_string),
        "info": _first_set(matcher.info_string, first.info_string),
    }
    indicators: SeverityIndicatorSet = {}
    for name, strings in configured.items():
        if strings is None:
            indicators[name] = Indicators(frozenset({name}), case_insensitive=True)
        else:
            indicators[name] = Indicators(frozenset(strings))
    return indicators


def _first_set(
    *candidates: tuple[str, ...] | None,
) -> tuple[str, ...] | None:
    for strings in candidates:
        if strings is not None:
            return strings
    return None


def resolve_severity(
    matcher: MatcherDefinition,
    step: PatternStep,
    match: re.Match[str],
    current: Severity,
) -> Severity:
    if matcher.severity:
        # Unrecognised overrides are ignored rather than rejected.
        return _OVERRIDES.get(matcher.severity.lower(), current)

    if step.severity is None:
        return current
    captured = match.group(step.severity)
    if captured is None:
        return current

    indicators = build_indicator_set(matcher)
    for name, severity in _CATEGORIES:
        if indicators[name].matches(captured):
            return severity
    return current
