"""
Expand a downloaded zip (maps.zip) into the game directory, keeping relative paths and file modes.
"""

import os
import shutil
import stat
import zipfile

from launcheq.errors import ArchiveError


def _member_mode(info: zipfile.ZipInfo) -> int:
    """Unix permission bits stored in the zip entry, 0 when the archive was made on Windows."""
    return stat.S_IMODE(info.external_attr >> 16)


def unpack(src_file: str, dst_dir: str) -> int:
    """
    Extract every member of src_file under dst_dir. Returns the number of files written.

    Existing files are truncated and overwritten. Members whose path would land
    outside dst_dir abort the extraction.
    """
    ext = os.path.splitext(src_file)[1]
    if ext != ".zip":
        raise ArchiveError(f"invalid extension: {ext or '(none)'}")

    root = os.path.abspath(dst_dir)
    written = 0
    try:
        with zipfile.ZipFile(src_file) as archive:
            for info in archive.infolist():
                target = os.path.abspath(os.path.join(root, info.filename))
                if os.path.commonpath([root, target]) != root:
                    raise ArchiveError(f"{info.filename} escapes {dst_dir}")

                if info.is_dir():
                    os.makedirs(target, exist_ok=True)
                    continue

                os.makedirs(os.path.dirname(target), exist_ok=True)
                with archive.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                mode = _member_mode(info)
                if mode:
                    os.chmod(target, mode)
                written += 1
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"open {src_file}: {e}") from e
    except OSError as e:
        raise ArchiveError(f"unzip {src_file}: {e}") from e
    return written
