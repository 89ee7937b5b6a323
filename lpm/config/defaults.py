from __future__ import annotations

import logging
from typing import Any

log = logging.getLogger(__name__)


def get_parser_matchers(parsers: dict[str, Any], parser: str) -> list[dict[str, Any]]:
    """Get the raw matcher tables configured for *parser*.

    Returns an empty list if *parser* is unknown or its entry is not a list
    of tables.
    """
    entry = parsers.get(parser)
    if entry is None:
        return []
    if not isinstance(entry, list):
        log.warning("Parser %r must map to a list of matchers", parser)
        return []
    return [m for m in entry if isinstance(m, dict)]


DEFAULT_CONFIG: dict = {
    "general": {
        "log_file": "~/.local/share/lpm/lpm.log",
        "log_level": "INFO",
        "workspace_folder": "",
    },
    "parsers": {
        "gcc": [
            {
                "title": "Compiler diagnostics",
                "source": "gcc",
                "fileLocation": ["relative", "${workspaceFolder}"],
                "pattern": {
                    "regexp": r"^(.*?):(\d+):(\d+):\s+(?:fatal\s+)?(warning|error|note):\s+(.*)$",
                    "file": 1,
                    "line": 2,
                    "column": 3,
                    "severity": 4,
                    "message": 5,
                },
            },
            {
                "title": "Linker errors",
                "source": "ld",
                "severity": "error",
                "defaultSelected": False,
                "pattern": {
                    "regexp": r"^(?:/usr/bin/)?ld: (.*)$",
                    "message": 1,
                },
            },
        ],
        "build": [
            {
                "title": "Indented problem blocks",
                "source": "build",
                "pattern": [
                    {
                        "regexp": r"^(ERROR|WARNING|INFO) at (.+?):(\d+)$",
                        "severity": 1,
                        "file": 2,
                        "line": 3,
                    },
                    {
                        "regexp": r"^\s+(\S.*)$",
                        "message": 1,
                        "loop": True,
                    },
                ],
            },
        ],
    },
}
