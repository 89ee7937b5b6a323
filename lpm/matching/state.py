from __future__ import annotations

from dataclasses import dataclass

from .message import DEFAULT_MESSAGE
from .models import Range, Severity
from .paths import NO_FILE

DEFAULT_RANGE = Range(1, 1, 1, 1)


@dataclass
class MatcherState:
    """Cursor and partially collected diagnostic for one matcher in one scan."""

    step_index: int = 0
    range: Range = DEFAULT_RANGE
    message: str = DEFAULT_MESSAGE
    append_message: bool = False
    severity: Severity = Severity.HINT
    code: str | None = None
    path: str = NO_FILE
    # Matched content not yet handed to the emitter.
    pending: bool = False

    @property
    def is_open(self) -> bool:
        """A diagnostic has matched lines that were not emitted yet."""
        return self.pending

    def reset(self) -> None:
        fresh = MatcherState()
        self.step_index = fresh.step_index
        self.range = fresh.range
        self.message = fresh.message
        self.append_message = fresh.append_message
        self.severity = fresh.severity
        self.code = fresh.code
        self.path = fresh.path
        self.pending = fresh.pending
