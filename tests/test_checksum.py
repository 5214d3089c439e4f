"""Tests for file hashing and size formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from launcheq.checksum import format_size, md5_file

if TYPE_CHECKING:
    from pathlib import Path


class TestMd5File:
    def test_matches_known_digest(self, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_bytes(b"hello world")
        assert md5_file(str(path)) == "5eb63bbbe01eeed093cb22bb8f5acdc3"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert md5_file(str(path)) == "d41d8cd98f00b204e9800998ecf8427e"

    def test_large_file_is_read_in_chunks(self, tmp_path: Path) -> None:
        import hashlib

        data = b"x" * (200 * 1024 + 7)
        path = tmp_path / "big.bin"
        path.write_bytes(data)
        assert md5_file(str(path)) == hashlib.md5(data).hexdigest()

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            md5_file(str(tmp_path / "nope"))


class TestFormatSize:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0.00 bytes"),
            (512, "512.00 bytes"),
            (1023, "1023.00 bytes"),
            (1024, "1.00 KB"),
            (2048, "2.00 KB"),
            (1_048_576, "1.00 MB"),
            (1536 * 1024 * 1024, "1.50 GB"),
            (2 * 1024**4, "2.00 TB"),
        ],
    )
    def test_units(self, size: int, expected: str) -> None:
        assert format_size(size) == expected
