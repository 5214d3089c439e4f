"""Tests for the run log buffer."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import pytest

from launcheq.patchlog import PatchLog

if TYPE_CHECKING:
    from pathlib import Path


def test_lines_are_timestamped_and_forwarded(capsys: pytest.CaptureFixture[str]) -> None:
    seen: list[str] = []
    log = PatchLog(seen.append)
    log("Downloading maps.zip...")

    assert re.fullmatch(r"\[\d\d:\d\d:\d\d\] Downloading maps\.zip\.\.\.", log.lines[0])
    assert seen == log.lines
    assert "Downloading maps.zip..." in capsys.readouterr().out


def test_echo_off(capsys: pytest.CaptureFixture[str]) -> None:
    log = PatchLog(echo=False)
    log.log("quiet")
    assert capsys.readouterr().out == ""
    assert len(log.lines) == 1


def test_write(tmp_path: Path) -> None:
    log = PatchLog(echo=False)
    log("one")
    log("two")
    path = tmp_path / "launcheq.txt"
    log.write(str(path))
    lines = path.read_text().splitlines()
    assert [line.split("] ", 1)[1] for line in lines] == ["one", "two"]


def test_write_failure_raises(tmp_path: Path) -> None:
    log = PatchLog(echo=False)
    with pytest.raises(OSError):
        log.write(str(tmp_path / "missing" / "launcheq.txt"))
