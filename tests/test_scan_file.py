from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest

from lpm.errors import ScanCancelled
from lpm.matching import Severity, compile_matcher, scan_file

BLOCKS = compile_matcher(
    {
        "title": "blocks",
        "pattern": [
            {"regexp": r"^(ERROR|WARNING) at (.+?):(\d+)$", "severity": 1, "file": 2, "line": 3},
            {"regexp": r"^\s+(\S.*)$", "message": 1, "loop": True},
        ],
    }
)

SELF_LINKED = compile_matcher(
    {
        "title": "log lines",
        "severity": "info",
        "linkToLogFile": True,
        "pattern": {"regexp": r"^INFO (.*)$", "message": 1},
    }
)


def _write_log(tmp_path: Path, text: str) -> Path:
    log = tmp_path / "build.log"
    log.write_text(text)
    return log


@pytest.mark.asyncio
async def test_scan_file_flushes_trailing_block(tmp_path: Path) -> None:
    log = _write_log(tmp_path, "ERROR at foo.c:10\n  bad thing\n  happened\n")
    result = await scan_file([BLOCKS], str(log))
    (record,) = result["foo.c"]
    assert record.message == "bad thing happened"
    assert record.severity is Severity.ERROR


@pytest.mark.asyncio
async def test_scan_file_links_to_log_path(tmp_path: Path) -> None:
    log = _write_log(tmp_path, "start\nINFO ready\n")
    result = await scan_file([SELF_LINKED], str(log))
    (record,) = result[os.path.abspath(log)]
    assert record.range.start_line == 1
    assert record.message == "ready"


@pytest.mark.asyncio
async def test_scan_file_handles_windows_newlines(tmp_path: Path) -> None:
    log = tmp_path / "crlf.log"
    log.write_bytes(b"WARNING at a.c:2\r\n  tail\r\n")
    result = await scan_file([BLOCKS], str(log))
    assert result["a.c"][0].message == "tail"


@pytest.mark.asyncio
async def test_scan_file_cancelled_before_first_line(tmp_path: Path) -> None:
    log = _write_log(tmp_path, "ERROR at foo.c:10\n")
    cancel = asyncio.Event()
    cancel.set()
    with pytest.raises(ScanCancelled) as info:
        await scan_file([BLOCKS], str(log), cancel=cancel)
    assert info.value.lines_read == 0


@pytest.mark.asyncio
async def test_scan_file_missing_log_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        await scan_file([BLOCKS], str(tmp_path / "missing.log"))
