from __future__ import annotations


class LPMError(Exception):
    """Base class for every error raised by lpm."""


class ConfigError(LPMError):
    """A matcher definition cannot be used.

    Fatal to the affected matcher only: it is left out of the active set and
    the remaining matchers still run.
    """

    def __init__(self, message: str, matcher: str = "") -> None:
        super().__init__(f"{matcher}: {message}" if matcher else message)
        self.matcher = matcher


class SelectionError(LPMError):
    """No usable parser or matcher set could be selected for a scan."""


class ScanCancelled(LPMError):
    """The host cancelled a scan between two lines."""

    def __init__(self, lines_read: int) -> None:
        super().__init__(f"Scan cancelled after {lines_read} lines")
        self.lines_read = lines_read


class MatcherInvariantError(LPMError, RuntimeError):
    """A compiled matcher broke an internal invariant; this is a bug."""
