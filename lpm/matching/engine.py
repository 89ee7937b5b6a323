from __future__ import annotations

import asyncio
import logging
import os
from typing import Iterable, Sequence

from lpm.errors import MatcherInvariantError, ScanCancelled

from .emitter import DiagnosticEmitter
from .location import resolve_location
from .message import accumulate_message
from .models import DiagnosticRecord, MatcherDefinition, PatternStep
from .paths import log_file_anchor, resolve_path
from .severity import resolve_severity
from .state import MatcherState

log = logging.getLogger(__name__)

ScanResult = dict[str, list[DiagnosticRecord]]


class ProblemScanner:
    """Runs a set of matchers over a log, one line at a time.

    Every matcher keeps its own :class:`MatcherState`; all of them see a line
    before the next line is fed.  Call :meth:`finish` once the input is
    exhausted to flush multi-line problems that were still being collected.
    """

    def __init__(
        self,
        matchers: Sequence[MatcherDefinition],
        log_path: str = "",
        workspace: str | None = None,
    ) -> None:
        for matcher in matchers:
            if not matcher.steps:
                raise MatcherInvariantError(
                    f"Matcher {matcher.title!r} has no pattern steps after compilation"
                )
        self._matchers: list[MatcherDefinition] = list(matchers)
        self._states: list[MatcherState] = [MatcherState() for _ in self._matchers]
        self._emitter = DiagnosticEmitter()
        self._log_path = log_path
        self._workspace = workspace
        self._finished = False
        self.line_number: int = 0

    @property
    def states(self) -> list[MatcherState]:
        return self._states

    def feed(self, line: str) -> None:
        if self._finished:
            raise RuntimeError("Cannot feed lines to a finished scan")
        line = line.rstrip("\r\n")
        for matcher, state in zip(self._matchers, self._states):
            self._advance(matcher, state, line)
        self.line_number += 1

    def finish(self) -> ScanResult:
        if not self._finished:
            self._finished = True
            for matcher, state in zip(self._matchers, self._states):
                if state.is_open:
                    log.debug("Flushing open problem for %r at end of input", matcher.title)
                    self._emit(matcher, state)
                state.reset()
            log.info(
                "Scanned %d lines with %d matchers: %d problems",
                self.line_number,
                len(self._matchers),
                len(self._emitter),
            )
        return self._emitter.results()

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _advance(self, matcher: MatcherDefinition, state: MatcherState, line: str) -> None:
        step = matcher.steps[state.step_index]
        match = step.regexp.search(line)

        if match is None:
            # A failed match ends a trailing multi-line message.
            if _collecting_message(matcher, step):
                self._emit(matcher, state)
            state.reset()
            return

        state.severity = resolve_severity(matcher, step, match, state.severity)
        if step.code is not None:
            state.code = match.group(step.code)
        state.path = resolve_path(
            matcher, step, match, state.path, self._log_path, self._workspace
        )
        if matcher.link_to_log_file:
            if state.step_index == 0:
                state.range = log_file_anchor(self.line_number)
        else:
            state.range = resolve_location(matcher, step, match, state.range)
        state.message, state.append_message = accumulate_message(
            step, match, state.message, state.append_message
        )
        state.pending = True

        if state.step_index < matcher.last_index:
            state.step_index += 1
            return

        if not _collecting_message(matcher, step):
            self._emit(matcher, state)
        if len(matcher.steps) == 1 or not step.loop:
            state.reset()

    def _emit(self, matcher: MatcherDefinition, state: MatcherState) -> None:
        record = self._emitter.emit(matcher, state)
        state.pending = False
        log.debug(
            "%s: %s problem in %s at line %d",
            matcher.title,
            record.severity.label,
            state.path,
            self.line_number,
        )


def _collecting_message(matcher: MatcherDefinition, step: PatternStep) -> bool:
    # A lone step restarts after every match, so it never holds a message open.
    return len(matcher.steps) > 1 and step.is_collecting_message


def scan_lines(
    matchers: Sequence[MatcherDefinition],
    lines: Iterable[str],
    log_path: str = "",
    workspace: str | None = None,
) -> ScanResult:
    scanner = ProblemScanner(matchers, log_path=log_path, workspace=workspace)
    for line in lines:
        scanner.feed(line)
    return scanner.finish()


async def scan_file(
    matchers: Sequence[MatcherDefinition],
    path: str,
    workspace: str | None = None,
    cancel: asyncio.Event | None = None,
) -> ScanResult:
    """Scan the log at *path*, reading it one line at a time.

    Setting *cancel* stops the scan before the next line is read and raises
    :class:`ScanCancelled`; nothing collected so far is returned.
    """
    log_path = os.path.abspath(path)
    scanner = ProblemScanner(matchers, log_path=log_path, workspace=workspace)
    log.info("Scanning %s with %d matchers", log_path, len(matchers))
    with open(log_path, encoding="utf-8", errors="replace") as handle:
        while True:
            if cancel is not None and cancel.is_set():
                raise ScanCancelled(scanner.line_number)
            line = await asyncio.to_thread(handle.readline)
            if not line:
                break
            scanner.feed(line)
    return scanner.finish()
