"""
Remote file list (filelist_<client>.yml): what the game directory should contain and what must be removed.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

import requests
import yaml

from launcheq.config import HTTP_TIMEOUT
from launcheq.errors import ManifestParseError, ManifestUnavailableError


@dataclass(frozen=True)
class FileEntry:
    name: str
    size: int = 0
    md5: str = ""


@dataclass(frozen=True)
class DeleteEntry:
    name: str


@dataclass(frozen=True)
class FileList:
    version: str = ""
    download_prefix: str = ""
    downloads: tuple[FileEntry, ...] = field(default_factory=tuple)
    deletes: tuple[DeleteEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileList":
        """
        Build a FileList from the decoded YAML document.

        Entries without a name are dropped. downloadPrefix is also accepted in
        lowercase, the form older servers publish.
        """
        prefix = data.get("downloadPrefix", data.get("downloadprefix")) or ""
        downloads = []
        for entry in data.get("downloads") or []:
            if not isinstance(entry, dict) or not entry.get("name"):
                continue
            downloads.append(
                FileEntry(
                    name=str(entry["name"]),
                    size=int(entry.get("size") or 0),
                    md5=str(entry.get("md5") or ""),
                )
            )
        deletes = [
            DeleteEntry(name=str(entry["name"]))
            for entry in data.get("deletes") or []
            if isinstance(entry, dict) and entry.get("name")
        ]
        version = data.get("version")
        return cls(
            version="" if version is None else str(version),
            download_prefix=str(prefix).rstrip("/"),
            downloads=tuple(downloads),
            deletes=tuple(deletes),
        )

    def short_version(self) -> str | None:
        """First 8 characters of the version, or None for an unversioned list."""
        if len(self.version) < 8:
            return None
        return self.version[:8]


def _get(session: requests.Session, url: str) -> requests.Response:
    return session.get(url, timeout=HTTP_TIMEOUT)


def fetch_file_list(
    session: requests.Session,
    patcher_url: str,
    client_version: str,
    log: Callable[[str], None],
) -> FileList:
    """
    Download and decode the file list.

    Tries {patcher_url}/filelist_<client>.yml and, only if that request fails to
    complete, the legacy {patcher_url}/<client>/filelist_<client>.yml.

    Raises ManifestUnavailableError for transport failures or a non-200 answer,
    ManifestParseError when the body is not a YAML mapping.
    """
    base = patcher_url.rstrip("/")
    url = f"{base}/filelist_{client_version}.yml"
    log(f"Downloading {url}")
    try:
        resp = _get(session, url)
    except requests.RequestException:
        url = f"{base}/{client_version}/filelist_{client_version}.yml"
        log(f"Downloading legacy {url}")
        try:
            resp = _get(session, url)
        except requests.RequestException as e:
            raise ManifestUnavailableError(f"download {url}: {e}") from e

    with resp:
        if resp.status_code != 200:
            raise ManifestUnavailableError(f"download {url} responded {resp.status_code} (not 200)")
        body = resp.content

    try:
        data = yaml.safe_load(body)
    except yaml.YAMLError as e:
        raise ManifestParseError(f"decode filelist: {e}") from e
    if not isinstance(data, dict):
        raise ManifestParseError("decode filelist: document is not a mapping")
    try:
        return FileList.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ManifestParseError(f"decode filelist: {e}") from e
