"""
Bring the game directory in line with the remote file list: compare local files by MD5,
download only missing or changed files, delete files the list retires, remember the applied version.
"""

import ntpath
import os
import stat
import time
from typing import Callable

import requests

from launcheq.archive import unpack
from launcheq.checksum import CHUNK_SIZE, format_size, md5_file
from launcheq.config import HTTP_TIMEOUT, Config
from launcheq.errors import DownloadError, PatchError
from launcheq.manifest import FileEntry, FileList

MAPS_PREFIX = "maps/"
MAPS_ARCHIVE = "maps.zip"


def _join_url(base_url: str, *parts: str) -> str:
    """Join URL parts with single slashes. base_url may end with /."""
    path = "/".join(p.replace("\\", "/").strip("/") for p in parts if p)
    return f"{base_url.rstrip('/')}/{path}" if path else base_url


def _unsafe_reason(name: str) -> str | None:
    """Why name must not be written under the game directory, or None when it is safe."""
    if ".." in name:
        return "has .. inside it"
    if ntpath.splitdrive(name)[0]:
        return "is a drive or share path"
    return None


def _is_maps(name: str) -> bool:
    return name.lower().startswith(MAPS_PREFIX)


class FileSynchronizer:
    """
    One reconciliation pass over a FileList.

    The maps archive is fetched at most once per instance; create a new
    synchronizer for every run.
    """

    def __init__(
        self,
        session: requests.Session,
        config: Config,
        root_path: str,
        patcher_url: str,
        client_version: str,
        log: Callable[[str], None],
        progress_callback: Callable[[int, int, str], None] | None = None,
    ):
        self.session = session
        self.config = config
        self.root_path = os.path.abspath(root_path)
        self.patcher_url = patcher_url.rstrip("/")
        self.client_version = client_version
        self.log = log
        self.progress_callback = progress_callback
        self.maps_downloaded = False
        self.is_patched = False
        self.total_downloaded = 0
        self.summary = ""

    def _local_path(self, name: str) -> str:
        return os.path.join(self.root_path, name.replace("\\", "/").lstrip("/").replace("/", os.sep))

    def patch(self, file_list: FileList) -> None:
        """
        Apply file_list to the game directory. Raises PatchError when the pass has to stop:
        a directory cannot be created, a file cannot be checked, or a download fails.
        Delete failures and a failed version save are only logged.
        """
        start = time.monotonic()
        short_version = file_list.short_version()

        if self.config.file_list_version == file_list.version:
            if short_version is None:
                self.log("We are up to date")
            else:
                self.log(f"We are up to date latest patch {short_version}")
            return

        total_size = sum(entry.size for entry in file_list.downloads)
        if short_version is None:
            self.log(f"Total patch size: {format_size(total_size)}")
        else:
            self.log(f"Total patch size: {format_size(total_size)}, version: {short_version}")

        total = len(file_list.downloads)
        maps_skip_logged = False
        for i, entry in enumerate(file_list.downloads):
            if self.progress_callback:
                self.progress_callback(i + 1, total, entry.name)

            reason = _unsafe_reason(entry.name)
            if reason:
                self.log(f"Skipping {entry.name}, {reason}")
                continue

            local_path = self._local_path(entry.name)
            if "/" in entry.name:
                parent = os.path.dirname(local_path)
                try:
                    os.makedirs(parent, exist_ok=True)
                except OSError as e:
                    raise PatchError(f"mkdir {parent}: {e}") from e

            try:
                os.stat(local_path)
            except FileNotFoundError:
                self._download_new(entry, file_list.download_prefix)
                continue
            except OSError as e:
                raise PatchError(f"stat {entry.name}: {e}") from e

            try:
                local_hash = md5_file(local_path)
            except OSError as e:
                raise PatchError(f"md5checksum {entry.name}: {e}") from e

            if local_hash.lower() == entry.md5.strip().lower():
                if _is_maps(entry.name):
                    # one line for the whole maps set
                    if maps_skip_logged:
                        continue
                    maps_skip_logged = True
                self.log(f"{entry.name} skipped (up to date)")
                continue

            self._download_new(entry, file_list.download_prefix)

        for entry in file_list.deletes:
            self._delete(entry.name)

        self.config.file_list_version = file_list.version
        try:
            self.config.save()
        except OSError as e:
            self.log(f"Failed to save version to {os.path.basename(self.config.path) or 'config'}: {e}")

        elapsed = time.monotonic() - start
        if self.total_downloaded == 0:
            self.summary = f"Finished patch in {elapsed:0.2f} seconds"
        else:
            self.summary = f"Finished patch of {format_size(self.total_downloaded)} in {elapsed:0.2f} seconds"

    def _download_new(self, entry: FileEntry, download_prefix: str) -> None:
        self.download_entry(entry, download_prefix)
        self.total_downloaded += entry.size
        self.is_patched = True

    def download_entry(self, entry: FileEntry, download_prefix: str) -> None:
        """
        Fetch one entry. The first maps/ entry of a pass pulls maps.zip and expands it into
        the game directory instead; later maps/ entries are fetched one by one.
        """
        if not self.maps_downloaded and _is_maps(entry.name):
            self.log(f"Downloading {MAPS_ARCHIVE}...")
            archive_path = os.path.join(self.root_path, MAPS_ARCHIVE)
            self._download_to(_join_url(self.patcher_url, MAPS_ARCHIVE), archive_path, MAPS_ARCHIVE)
            unpack(archive_path, self.root_path)
            self.maps_downloaded = True
            return

        self.log(f"{entry.name} ({format_size(entry.size)})")
        url = _join_url(download_prefix, self.client_version, entry.name)
        self._download_to(url, self._local_path(entry.name), entry.name)

    def _download_to(self, url: str, dest_path: str, label: str) -> None:
        """Stream url into dest_path (created or truncated). Raises DownloadError."""
        try:
            resp = self.session.get(url, timeout=HTTP_TIMEOUT, stream=True)
        except requests.RequestException as e:
            raise DownloadError(f"download {url}: {e}") from e

        with resp:
            if resp.status_code != 200:
                raise DownloadError(f"download {url} responded {resp.status_code} (not 200)")
            try:
                with open(dest_path, "wb") as f:
                    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
            except (OSError, requests.RequestException) as e:
                raise DownloadError(f"write {label}: {e}") from e

    def _delete(self, name: str) -> None:
        reason = _unsafe_reason(name)
        if reason:
            self.log(f"Skipping {name}, {reason}")
            return
        local_path = self._local_path(name)
        try:
            st = os.stat(local_path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise PatchError(f"stat {name}: {e}") from e

        if stat.S_ISDIR(st.st_mode):
            self.log(f"Skipping deleting {name}, it is a directory")
            return
        try:
            os.remove(local_path)
        except OSError as e:
            self.log(f"Failed to delete {name}: {e}")
            return
        self.log(f"{name} removed")