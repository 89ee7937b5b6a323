from __future__ import annotations

from .models import DiagnosticRecord, MatcherDefinition
from .state import MatcherState


class DiagnosticEmitter:
    def __init__(self) -> None:
        # Insertion ordered: files appear in the order first reported.
        self._by_path: dict[str, list[DiagnosticRecord]] = {}
        self._count = 0

    def emit(self, matcher: MatcherDefinition, state: MatcherState) -> DiagnosticRecord:
        record = DiagnosticRecord(
            source=matcher.source_label,
            range=state.range,
            severity=state.severity,
            message=state.message,
            code=state.code,
        )
        self._by_path.setdefault(state.path, []).append(record)
        self._count += 1
        return record

    def results(self) -> dict[str, list[DiagnosticRecord]]:
        return {path: list(records) for path, records in self._by_path.items()}

    def __len__(self) -> int:
        return self._count
