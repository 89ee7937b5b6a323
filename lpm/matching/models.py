from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

# Stand-in for "end of the line" in a range's character columns.
MAX_CHAR: int = 2**31 - 1


class Severity(Enum):
    """Diagnostic severity, ordered the way editor diagnostic APIs order it."""

    ERROR = 0
    WARNING = 1
    INFORMATION = 2
    HINT = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class StepKind(Enum):
    LOCATION = "location"
    FILE = "file"  # Problem applies to a whole file; no location extraction.


@dataclass(frozen=True, slots=True)
class Range:
    start_line: int
    start_char: int
    end_line: int
    end_char: int

    def clamped(self) -> Range:
        """Return a copy with every endpoint raised to at least zero."""
        return Range(
            max(self.start_line, 0),
            max(self.start_char, 0),
            max(self.end_line, 0),
            max(self.end_char, 0),
        )


@dataclass(frozen=True, slots=True)
class DiagnosticRecord:
    source: str
    range: Range
    severity: Severity
    message: str
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "range": {
                "start_line": self.range.start_line,
                "start_char": self.range.start_char,
                "end_line": self.range.end_line,
                "end_char": self.range.end_char,
            },
            "severity": self.severity.label,
            "message": self.message,
            "code": self.code,
        }


# ── Location extraction modes ─────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CombinedLocation:
    """One capture group encoding ``line``, ``line,line`` or a full range."""

    index: int


@dataclass(frozen=True, slots=True)
class DiscreteLocation:
    """Independent capture groups for each range endpoint."""

    line: int | None = None
    end_line: int | None = None
    column: int | None = None
    end_column: int | None = None

    @property
    def is_empty(self) -> bool:
        return (
            self.line is None
            and self.end_line is None
            and self.column is None
            and self.end_column is None
        )


LocationMode = Union[CombinedLocation, DiscreteLocation]


# ── Matcher definitions ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PatternStep:
    regexp: re.Pattern[str]
    severity: int | None = None
    code: int | None = None
    file: int | None = None
    message: int | None = None
    location: LocationMode = DiscreteLocation()
    error_string: tuple[str, ...] | None = None
    warning_string: tuple[str, ...] | None = None
    info_string: tuple[str, ...] | None = None
    kind: StepKind = StepKind.LOCATION
    loop: bool = False

    @property
    def is_collecting_message(self) -> bool:
        """True for a looping step that does nothing but gather message text.

        Such a step cannot know its message is complete until a line fails
        to match, so the diagnostic is emitted on that non-match instead of
        on the match itself.
        """
        return (
            self.message is not None
            and self.loop
            and self.severity is None
            and self.code is None
            and self.file is None
            and isinstance(self.location, DiscreteLocation)
            and self.location.is_empty
        )


@dataclass(frozen=True, slots=True)
class FileLocation:
    mode: str = "absolute"  # "absolute" | "relative"
    base: str = ""

    @property
    def is_relative(self) -> bool:
        return self.mode == "relative"


@dataclass(frozen=True, slots=True)
class MatcherDefinition:
    title: str
    steps: tuple[PatternStep, ...]
    severity: str | None = None
    source: str | None = None
    file_location: FileLocation = FileLocation()
    link_to_log_file: bool = False
    location_zero_based: bool = False
    line_zero_based: bool = False
    column_zero_based: bool = False
    error_string: tuple[str, ...] | None = None
    warning_string: tuple[str, ...] | None = None
    info_string: tuple[str, ...] | None = None
    default_selected: bool = True

    @property
    def source_label(self) -> str:
        return f"LPM-{self.source}" if self.source else "LPM"

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1
