from __future__ import annotations

from .compiler import compile_matcher, compile_matchers
from .emitter import DiagnosticEmitter
from .engine import ProblemScanner, ScanResult, scan_file, scan_lines
from .models import (
    MAX_CHAR,
    CombinedLocation,
    DiagnosticRecord,
    DiscreteLocation,
    FileLocation,
    MatcherDefinition,
    PatternStep,
    Range,
    Severity,
    StepKind,
)
from .paths import NO_FILE
from .state import MatcherState

__all__ = [
    "MAX_CHAR",
    "NO_FILE",
    "CombinedLocation",
    "DiagnosticEmitter",
    "DiagnosticRecord",
    "DiscreteLocation",
    "FileLocation",
    "MatcherDefinition",
    "MatcherState",
    "PatternStep",
    "ProblemScanner",
    "Range",
    "ScanResult",
    "Severity",
    "StepKind",
    "compile_matcher",
    "compile_matchers",
    "scan_file",
    "scan_lines",
]
