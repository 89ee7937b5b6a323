from __future__ import annotations

import os
import re

from .models import MatcherDefinition, PatternStep, Range

# Key for problems that could not be tied to a file.
NO_FILE = "None"

WORKSPACE_FOLDER = "${workspacefolder}"


def resolve_path(
    matcher: MatcherDefinition,
    step: PatternStep,
    match: re.Match[str],
    current: str,
    log_path: str = "",
    workspace: str | None = None,
) -> str:
    """Return the file a problem belongs to.

    In link-to-log-file mode this is always the scanned log.  Otherwise a
    non-empty file capture wins, joined onto the matcher's base directory
    when its file location is relative.  With neither, *current* is kept.
    """
    if matcher.link_to_log_file:
        return log_path

    if step.file is None:
        return current
    captured = match.group(step.file)
    if not captured:
        return current

    if matcher.file_location.is_relative:
        base = matcher.file_location.base
        if base.lower() == WORKSPACE_FOLDER and workspace:
            base = workspace
        return os.path.normpath(os.path.join(base, captured))
    return captured


def log_file_anchor(line_number: int) -> Range:
    """Range pointing at the start of a line of the scanned log."""
    return Range(line_number, 0, line_number, 0)
