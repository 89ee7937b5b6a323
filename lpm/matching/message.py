from __future__ import annotations

import re

from .models import PatternStep

DEFAULT_MESSAGE = "No message found."


def accumulate_message(
    step: PatternStep, match: re.Match[str], message: str, append: bool
) -> tuple[str, bool]:
    """Fold this step's message capture into the diagnostic's message.

    The first non-empty capture replaces the default text; later captures for
    the same open diagnostic are appended, separated by a single space.
    Returns the new ``(message, append)`` pair.
    """
    if step.message is None:
        return message, append
    captured = match.group(step.message)
    if captured is None:
        return message, append
    captured = captured.strip()
    if not captured:
        return message, append
    if append:
        return f"{message} {captured}", True
    return captured, True
