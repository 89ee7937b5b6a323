from __future__ import annotations

import argparse
import asyncio
import sys

from rich.console import Console
from rich.markup import escape

from lpm.config.defaults import get_parser_matchers
from lpm.config.manager import ConfigManager
from lpm.errors import ConfigError, LPMError, SelectionError
from lpm.report import print_report, to_json
from lpm.session import ScanSession, run_scan
from lpm.utils.logger import setup_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lpm",
        description="LPM: scan a log file for problems with configurable matchers",
    )
    parser.add_argument("log", nargs="?", help="Log file to scan")
    parser.add_argument("--config", help="Path to config file")
    parser.add_argument("--parser", help="Parser to use (defaults to the only one configured)")
    parser.add_argument(
        "--matcher",
        action="append",
        dest="matchers",
        metavar="TITLE",
        help="Matcher title to run; repeat for several (default: defaultSelected ones)",
    )
    parser.add_argument("--workspace", help="Folder substituted for ${workspaceFolder}")
    parser.add_argument("--json", action="store_true", help="Print problems as JSON")
    parser.add_argument("--list", action="store_true", help="List parsers and matchers, then exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    err = Console(stderr=True)
    try:
        cm = ConfigManager(config_path=args.config)
        setup_logging(
            log_file=str(cm.get("general.log_file", "")),
            log_level=str(cm.get("general.log_level", "INFO")),
            verbose=args.verbose,
        )
        parsers = cm.parsers()
    except ConfigError as exc:
        err.print(f"[bold red]Configuration error:[/] {escape(str(exc))}")
        return 1

    if args.list:
        for name in parsers:
            print(name)
            for idx, raw in enumerate(get_parser_matchers(parsers, name)):
                print(f"  {raw.get('title') or f'Matcher {idx}'}")
        return 0

    workspace = args.workspace or str(cm.get("general.workspace_folder", "")) or None
    try:
        result = asyncio.run(
            run_scan(
                ScanSession(),
                parsers,
                log_path=args.log,
                parser=args.parser,
                matchers=args.matchers,
                workspace=workspace,
            )
        )
    except SelectionError as exc:
        err.print(f"[bold red]{escape(str(exc))}[/]")
        return 2
    except OSError as exc:
        err.print(f"[bold red]Cannot read log:[/] {escape(str(exc))}")
        return 1
    except LPMError as exc:
        err.print(f"[bold red]Internal error, please report it:[/] {escape(str(exc))}")
        return 3

    if args.json:
        print(to_json(result))
    else:
        print_report(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
