from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from lpm.config.defaults import get_parser_matchers
from lpm.errors import SelectionError
from lpm.matching import MatcherDefinition, ScanResult, compile_matchers, scan_file

log = logging.getLogger(__name__)


@dataclass
class Selection:
    parser: str
    titles: list[str]
    matchers: list[MatcherDefinition]


@dataclass
class ScanSession:
    """What the user picked last, so a rescan can repeat it.

    One session belongs to one host; it is passed explicitly to
    :func:`run_scan` instead of living in module state.
    """

    last_parser: str = ""
    last_matchers: dict[str, list[str]] = field(default_factory=dict)
    last_log: str | None = None

    def select(
        self,
        parsers: Mapping[str, Any],
        parser: str | None = None,
        matchers: Sequence[str] | None = None,
    ) -> Selection:
        """Choose a parser and the matchers to run from it.

        Falls back to the last parser used (or the only one configured) and
        to the last matcher titles used with that parser, else to every
        matcher not marked ``defaultSelected = false``.
        """
        if not parsers:
            raise SelectionError(
                "You must define at least one parser and problem matcher "
                "before scanning."
            )

        name = parser or self.last_parser
        if not name:
            if len(parsers) != 1:
                raise SelectionError(
                    "Choose a parser: " + ", ".join(sorted(parsers))
                )
            name = next(iter(parsers))
        if name not in parsers:
            raise SelectionError(f"Unknown parser {name!r}")

        raw_matchers = get_parser_matchers(dict(parsers), name)
        if not raw_matchers:
            raise SelectionError(
                f"You must define at least one problem matcher in the "
                f"{name} parser configuration."
            )
        titles = [
            raw.get("title") or f"Matcher {idx}" for idx, raw in enumerate(raw_matchers)
        ]

        if matchers is not None:
            wanted = list(matchers)
            unknown = [t for t in wanted if t not in titles]
            if unknown:
                raise SelectionError(
                    f"Parser {name!r} has no matcher named " + ", ".join(map(repr, unknown))
                )
        elif name in self.last_matchers:
            wanted = [t for t in self.last_matchers[name] if t in titles]
        else:
            wanted = [
                title
                for title, raw in zip(titles, raw_matchers)
                if raw.get("defaultSelected", True) is not False
            ]
        if not wanted:
            raise SelectionError(f"No matchers selected for parser {name!r}")

        chosen = [
            dict(raw, title=title)
            for title, raw in zip(titles, raw_matchers)
            if title in wanted
        ]
        compiled = compile_matchers(chosen)
        if not compiled:
            raise SelectionError(
                f"None of the selected matchers in parser {name!r} could be compiled"
            )

        self.last_parser = name
        self.last_matchers[name] = wanted
        return Selection(parser=name, titles=wanted, matchers=compiled)

    def resolve_log(self, path: str | None = None) -> str:
        log_path = path or self.last_log
        if not log_path:
            raise SelectionError("No log file was chosen")
        return log_path


async def run_scan(
    session: ScanSession,
    parsers: Mapping[str, Any],
    log_path: str | None = None,
    parser: str | None = None,
    matchers: Sequence[str] | None = None,
    workspace: str | None = None,
    cancel: asyncio.Event | None = None,
) -> ScanResult:
    """Select matchers through *session*, then scan the chosen log.

    Selection problems raise :class:`SelectionError` before the log is
    opened.  The log is remembered only once the scan completes.
    """
    selection = session.select(parsers, parser=parser, matchers=matchers)
    path = session.resolve_log(log_path)
    log.info(
        "Parser %r, matchers: %s", selection.parser, ", ".join(selection.titles)
    )
    result = await scan_file(
        selection.matchers, path, workspace=workspace, cancel=cancel
    )
    session.last_log = path
    return result
