from __future__ import annotations

import json
from collections import Counter

from rich.console import Console
from rich.text import Text

from lpm.matching import MAX_CHAR, DiagnosticRecord, ScanResult, Severity

SEVERITY_STYLE: dict[Severity, str] = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "bold yellow",
    Severity.INFORMATION: "bold blue",
    Severity.HINT: "dim",
}


def render_record(record: DiagnosticRecord) -> Text:
    """One report row; positions are shown one-based like an editor."""
    rng = record.range
    line = Text("  ")
    line.append(f"{record.severity.label:<11}", style=SEVERITY_STYLE[record.severity])
    position = f"{rng.start_line + 1}:{rng.start_char + 1}"
    if rng.end_line != rng.start_line:
        position += f"-{rng.end_line + 1}"
    line.append(f"{position:<12}", style="cyan")
    if record.code:
        line.append(f"[{record.code}] ", style="magenta")
    line.append(record.message)
    line.append(f"  ({record.source})", style="dim")
    return line


def print_report(result: ScanResult, console: Console | None = None) -> None:
    console = console or Console()
    counts: Counter[Severity] = Counter()
    for path, records in result.items():
        console.print(Text(path, style="bold underline"))
        for record in records:
            console.print(render_record(record))
            counts[record.severity] += 1
        console.print()

    summary = Text(f"{sum(counts.values())} problems")
    for severity in Severity:
        if counts[severity]:
            summary.append(
                f"  {counts[severity]} {severity.label}",
                style=SEVERITY_STYLE[severity],
            )
    console.print(summary)


def to_json(result: ScanResult) -> str:
    def _record(record: DiagnosticRecord) -> dict:
        data = record.to_dict()
        if record.range.end_char == MAX_CHAR:
            data["range"]["end_char"] = None  # end of line
        return data

    return json.dumps(
        {path: [_record(r) for r in records] for path, records in result.items()},
        indent=2,
    )
