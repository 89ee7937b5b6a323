from __future__ import annotations

import logging
import os
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(
    log_file: str = "", log_level: str = "INFO", verbose: bool = False
) -> logging.Logger:
    """Configure the ``lpm`` logger once per process.

    Warnings (everything, with *verbose*) go to stderr through rich so they
    stay apart from the report on stdout; *log_file*, when set, receives
    records at *log_level* and above.
    """
    logger = logging.getLogger("lpm")
    if logger.handlers:
        return logger
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(logging.DEBUG if verbose else level)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=verbose,
    )
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        expanded = os.path.expanduser(log_file)
        Path(expanded).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(expanded, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
