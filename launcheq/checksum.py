"""
File hashing and human-readable sizes.
"""

import hashlib

CHUNK_SIZE = 64 * 1024

_SIZE_UNITS = ("bytes", "KB", "MB", "GB")


def md5_file(file_path: str) -> str:
    """Return the lowercase MD5 hex digest of a file, read in chunks. Raises OSError."""
    h = hashlib.md5()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def format_size(size: int) -> str:
    """512 -> '512.00 bytes', 2048 -> '2.00 KB'; each unit is 1024 of the previous one."""
    val = float(size)
    for unit in _SIZE_UNITS:
        if val < 1024:
            return f"{val:0.2f} {unit}"
        val /= 1024
    return f"{val:0.2f} TB"
