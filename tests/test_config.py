"""Tests for the launcher settings file."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from launcheq.config import DEFAULT_CLIENT_VERSION, DEFAULT_PATCHER_URL, Config

if TYPE_CHECKING:
    from pathlib import Path


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    cfg = Config.load(str(tmp_path / "launcheq.yml"))
    assert cfg.file_list_version == ""
    assert cfg.patcher_url == DEFAULT_PATCHER_URL
    assert DEFAULT_PATCHER_URL == ""
    assert cfg.client_version == DEFAULT_CLIENT_VERSION


def test_save_then_load(tmp_path: Path) -> None:
    path = str(tmp_path / "launcheq.yml")
    cfg = Config.load(path)
    cfg.file_list_version = "abc12345"
    cfg.save()

    again = Config.load(path)
    assert again.file_list_version == "abc12345"
    assert again == cfg


def test_unknown_keys_ignored_and_url_trimmed(tmp_path: Path) -> None:
    path = tmp_path / "launcheq.yml"
    path.write_text("patcher_url: http://my.server/\nauto_launch: true\nfile_list_version:\n")
    cfg = Config.load(str(path))
    assert cfg.patcher_url == "http://my.server"
    assert cfg.file_list_version == ""


def test_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "launcheq.yml"
    path.write_text("")
    assert Config.load(str(path)).file_list_version == ""


def test_not_a_mapping(tmp_path: Path) -> None:
    path = tmp_path / "launcheq.yml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ValueError):
        Config.load(str(path))


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "launcheq.yml"
    path.write_text("patcher_url: [oops")
    with pytest.raises(ValueError, match="not valid YAML"):
        Config.load(str(path))


def test_save_without_path() -> None:
    with pytest.raises(OSError):
        Config().save()
