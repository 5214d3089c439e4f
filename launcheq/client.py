"""
Patch run: fetch the file list, synchronize the game directory, then self-update the launcher.
A missing file list or a failed self-update only costs a log line; a failed patch ends the run with exit code 1.
"""

import os
import sys
import time
from typing import Callable

import requests

from launcheq import __version__
from launcheq.config import Config
from launcheq.errors import ManifestError, PatchError, QuarantineError, SelfUpdateError
from launcheq.manifest import fetch_file_list
from launcheq.patchlog import PatchLog
from launcheq.selfupdate import SelfUpdater, exe_base_name
from launcheq.updater import FileSynchronizer

DEFAULT_BASE_NAME = "launcheq"
PLAYER_DATA_FILE = "eqlsPlayerData.ini"


def frozen_executable() -> str | None:
    """Path of the running launcher when built with PyInstaller; None when run as a script."""
    if getattr(sys, "frozen", False):
        return sys.executable
    return None


class Client:
    def __init__(
        self,
        config: Config,
        root_path: str,
        exe_path: str | None = None,
        session: requests.Session | None = None,
        log_callback: Callable[[str], None] | None = None,
        progress_callback: Callable[[int, int, str], None] | None = None,
        echo: bool = True,
    ):
        self.config = config
        self.root_path = os.path.abspath(root_path)
        self.exe_path = exe_path
        self.base_name = exe_base_name(exe_path) if exe_path else DEFAULT_BASE_NAME
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.log = PatchLog(log_callback, echo=echo)
        self.progress_callback = progress_callback
        self.is_patched = False
        self.patch_summary = ""
        self.username = ""

    @property
    def log_path(self) -> str:
        return os.path.join(self.root_path, f"{self.base_name}.txt")

    def self_update_and_patch(self) -> None:
        """
        Raises PatchError when synchronization stops and QuarantineError when antivirus
        blocked the new launcher. Everything else is logged and skipped.
        """
        if not self.config.patcher_url:
            self.log(f"No patcher_url set in {self.base_name}.yml, skipping patch")
            return
        try:
            file_list = fetch_file_list(
                self.session, self.config.patcher_url, self.config.client_version, self.log
            )
        except ManifestError as e:
            self.log(f"Failed fetch file list, skipping: {e}")
            return

        synchronizer = FileSynchronizer(
            self.session,
            self.config,
            self.root_path,
            self.config.patcher_url,
            self.config.client_version,
            self.log,
            progress_callback=self.progress_callback,
        )
        try:
            synchronizer.patch(file_list)
        finally:
            self.is_patched = synchronizer.is_patched
            self.patch_summary = synchronizer.summary

        if not self.exe_path:
            self.log("Not running as a built executable, skipping self update")
            return
        updater = SelfUpdater(self.session, self.config.patcher_url, self.exe_path, self.log, self.root_path)
        try:
            updater.update()
        except QuarantineError:
            raise
        except SelfUpdateError as e:
            self.log(f"Failed self update, skipping: {e}")

    def fetch_username(self) -> str:
        """Username= value from eqlsPlayerData.ini, or '' when the file or the line is missing."""
        path = os.path.join(self.root_path, PLAYER_DATA_FILE)
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                for line in f:
                    line = line.rstrip("\r\n")
                    if line.startswith("Username="):
                        return line[len("Username="):]
        except FileNotFoundError:
            return ""
        except OSError as e:
            self.log(f"Failed grabbing username from {PLAYER_DATA_FILE}: {e}")
        return ""

    def run(self) -> int:
        """Full patch run. Writes <launcher>.txt and returns the process exit code."""
        start = time.monotonic()
        is_errored = False
        self.log(f"Starting {self.base_name} {__version__}")

        try:
            self.self_update_and_patch()
        except PatchError as e:
            self.log(f"Failed patch: {e}")
            is_errored = True
        except QuarantineError as e:
            self.log(
                f"Your antivirus is blocking {self.base_name} from being patched. "
                "You need to go into your antivirus and recover the file from quarantine."
            )
            self.log(str(e))
            is_errored = True
        finally:
            if self._owns_session:
                self.session.close()

        self.username = self.fetch_username()
        if self.username:
            self.log(f"Player: {self.username}")

        if self.is_patched:
            if self.patch_summary:
                self.log(self.patch_summary)
            self.log(f"You can check {self.base_name}.txt if you wish to review the patched files later.")
        if is_errored:
            self.log("Since patching failed, review the log above before launching EverQuest.")
        else:
            self.log("EverQuest is now patched and up to date.")
        self.log(f"Finished in {time.monotonic() - start:0.2f} seconds")

        try:
            self.log.write(self.log_path)
        except OSError as e:
            self.log(f"Failed to write log: {e}")
            is_errored = True
        return 1 if is_errored else 0
