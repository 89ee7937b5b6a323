from __future__ import annotations

import re
from dataclasses import replace

from .models import (
    MAX_CHAR,
    CombinedLocation,
    MatcherDefinition,
    PatternStep,
    Range,
    StepKind,
)

_DIGITS = re.compile(r"\d+")

# Used when a combined location group exists but did not participate.
_MISSING_LOCATION = "1,1,1,1"


def parse_combined_location(text: str) -> Range | None:
    """Read a range out of a single ``location`` capture.

    Supported shapes, by the number of digit runs found:

    * 1 -- ``line``: the whole line.
    * 2 or 3 -- ``startLine,endLine[,...]``: whole lines; a third number is
      ignored.
    * 4 or more -- ``startLine,startChar,endLine,endChar``.

    Returns ``None`` when *text* holds no digits at all.  Values are still
    one-based here; see :func:`resolve_location` for normalisation.
    """
    numbers = [int(d) for d in _DIGITS.findall(text)]
    if not numbers:
        return None
    if len(numbers) == 1:
        return Range(numbers[0], 1, numbers[0], MAX_CHAR)
    if len(numbers) <= 3:
        return Range(numbers[0], 1, numbers[1], MAX_CHAR)
    return Range(*numbers[:4])


def resolve_location(
    matcher: MatcherDefinition,
    step: PatternStep,
    match: re.Match[str],
    current: Range,
) -> Range:
    """Update *current* from this step's location captures.

    Captured values are converted from the log's indexing convention to
    zero-based positions and clamped so no endpoint is negative.  A matcher
    whose first step is of kind ``file`` keeps *current* untouched.
    """
    if matcher.steps[0].kind is StepKind.FILE:
        return current

    location = step.location
    if isinstance(location, CombinedLocation):
        text = match.group(location.index)
        if text is None:
            text = _MISSING_LOCATION
        rng = parse_combined_location(text) or current
        rng = _to_zero_based(matcher, rng, True, True, True, True)
        return rng.clamped()

    rng = current
    value = _group_int(match, location.line)
    if value is not None:
        # A bare line means the whole line unless an end is captured too.
        rng = replace(rng, start_line=value, end_line=value, end_char=MAX_CHAR)
        rng = _to_zero_based(matcher, rng, True, True, False, True)
    value = _group_int(match, location.end_line)
    if value is not None:
        rng = replace(rng, end_line=value)
        rng = _to_zero_based(matcher, rng, False, True, False, False)
    value = _group_int(match, location.column)
    if value is not None:
        rng = replace(rng, start_char=value)
        rng = _to_zero_based(matcher, rng, False, False, True, False)
    value = _group_int(match, location.end_column)
    if value is not None:
        rng = replace(rng, end_char=value)
        rng = _to_zero_based(matcher, rng, False, False, False, True)
    return rng.clamped()


def _group_int(match: re.Match[str], index: int | None) -> int | None:
    if index is None:
        return None
    text = match.group(index)
    if text is None:
        return None
    digits = _DIGITS.search(text)
    return int(digits.group()) if digits else None


def _to_zero_based(
    matcher: MatcherDefinition,
    rng: Range,
    start_line: bool,
    end_line: bool,
    start_char: bool,
    end_char: bool,
) -> Range:
    """Shift the selected endpoints down by one unless declared zero-based.

    ``problemLocationZeroBased`` covers the whole range; the line and column
    flags exempt just their own endpoints.  ``MAX_CHAR`` is never shifted.
    """
    if matcher.location_zero_based:
        return rng
    lines = not matcher.line_zero_based
    columns = not matcher.column_zero_based
    return Range(
        rng.start_line - 1 if lines and start_line else rng.start_line,
        _shift(rng.start_char) if columns and start_char else rng.start_char,
        rng.end_line - 1 if lines and end_line else rng.end_line,
        _shift(rng.end_char) if columns and end_char else rng.end_char,
    )


def _shift(column: int) -> int:
    return column if column == MAX_CHAR else column - 1
