"""
Launcher self-update: compare the MD5 of the running executable with the hash published
next to it on the patch server, and swap in the new build (used from the next launch).
"""

import os
from typing import Callable, Iterable

import requests

from launcheq.checksum import CHUNK_SIZE, md5_file
from launcheq.config import HTTP_TIMEOUT
from launcheq.errors import QuarantineError, SelfUpdateError

REMOTE_DOWN = "NOT FOUND"

# ERROR_VIRUS_INFECTED, ERROR_VIRUS_DELETED
_QUARANTINE_WINERRORS = (225, 226)
_QUARANTINE_TEXT = "contains a virus or potentially unwanted software"


def exe_base_name(exe_path: str) -> str:
    """launcheq.exe -> launcheq (everything before the first dot)."""
    name = os.path.basename(exe_path)
    return name.split(".", 1)[0] if "." in name else name


def _is_quarantine(err: OSError) -> bool:
    if getattr(err, "winerror", None) in _QUARANTINE_WINERRORS:
        return True
    return _QUARANTINE_TEXT in str(err)


def _remove_quietly(path: str) -> None:
    """Best-effort removal of a temporary file."""
    try:
        os.remove(path)
    except OSError:
        pass


def apply_update(chunks: Iterable[bytes], exe_path: str) -> None:
    """
    Replace exe_path with the bytes from chunks.

    The new build is written to .<name>.new, the running file is moved aside to
    .<name>.old (Windows allows renaming a running executable) and the new file
    takes its place. The old file is put back if the last rename fails.
    Raises QuarantineError when antivirus blocks the write, SelfUpdateError otherwise.
    """
    directory, name = os.path.split(os.path.abspath(exe_path))
    new_path = os.path.join(directory, f".{name}.new")
    old_path = os.path.join(directory, f".{name}.old")
    try:
        with open(new_path, "wb") as f:
            for chunk in chunks:
                f.write(chunk)
        os.chmod(new_path, os.stat(exe_path).st_mode)
        _remove_quietly(old_path)
        os.rename(exe_path, old_path)
        try:
            os.rename(new_path, exe_path)
        except OSError:
            os.rename(old_path, exe_path)
            raise
    except OSError as e:
        _remove_quietly(new_path)
        if _is_quarantine(e):
            raise QuarantineError(f"apply: {e}") from e
        raise SelfUpdateError(f"apply: {e}") from e
    except requests.RequestException as e:
        _remove_quietly(new_path)
        raise SelfUpdateError(f"apply: {e}") from e


class SelfUpdater:
    def __init__(
        self,
        session: requests.Session,
        patcher_url: str,
        exe_path: str,
        log: Callable[[str], None],
        work_dir: str | None = None,
    ):
        self.session = session
        self.patcher_url = patcher_url.rstrip("/")
        self.exe_path = os.path.abspath(exe_path)
        self.base_name = exe_base_name(exe_path)
        self.log = log
        self.work_dir = os.path.abspath(work_dir or os.getcwd())

    def cleanup(self) -> None:
        """Remove leftovers of a previous self-update. Only 'does not exist' is silent."""
        leftovers = (
            os.path.join(self.work_dir, f"{self.base_name}.bat"),
            os.path.join(os.path.dirname(self.exe_path), f".{os.path.basename(self.exe_path)}.old"),
        )
        for path in leftovers:
            label = os.path.basename(path)
            try:
                os.remove(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                self.log(f"Failed to remove {label}: {e}")
                continue
            self.log(f"Removed {label}")

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        try:
            resp = self.session.get(url, timeout=HTTP_TIMEOUT, stream=stream)
        except requests.RequestException as e:
            raise SelfUpdateError(f"download {url}: {e}") from e
        if resp.status_code != 200:
            resp.close()
            raise SelfUpdateError(f"download {url} responded {resp.status_code} (not 200)")
        return resp

    def update(self) -> bool:
        """
        Check the published hash and apply a new build when it differs.
        Returns True when a new executable was written.
        """
        self.cleanup()

        try:
            my_hash = md5_file(self.exe_path)
        except OSError as e:
            raise SelfUpdateError(f"checksum: {e}") from e

        url = f"{self.patcher_url}/{self.base_name}-hash.txt"
        self.log(f"Checking for self update at {url}")
        with self._get(url) as resp:
            remote_hash = resp.text

        my_hash = my_hash.strip().upper()
        remote_hash = remote_hash.strip().upper()

        if remote_hash == REMOTE_DOWN:
            self.log("Remote site down, ignoring self update")
            return False

        if my_hash == remote_hash:
            self.log("Self update not needed")
            return False

        self.log(f"Updating {self.base_name}... {my_hash} vs {remote_hash}")
        url = f"{self.patcher_url}/{self.base_name}.exe"
        self.log(f"Downloading {self.base_name} at {url}")
        with self._get(url, stream=True) as resp:
            self.log("Applying update (will be used next launch)")
            apply_update(resp.iter_content(chunk_size=CHUNK_SIZE), self.exe_path)
        return True
