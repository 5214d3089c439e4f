"""
Launcher settings, stored as <launcher>.yml next to the game files.
Holds the last applied file list version so an unchanged patch is skipped on the next run.
"""

import os
from dataclasses import asdict, dataclass, field, fields

import yaml

# Patch server (no trailing slash). Each server publishes its own; set patcher_url in the settings file
DEFAULT_PATCHER_URL = ""
DEFAULT_CLIENT_VERSION = "rof"
HTTP_TIMEOUT = 30


@dataclass
class Config:
    file_list_version: str = ""
    patcher_url: str = DEFAULT_PATCHER_URL
    client_version: str = DEFAULT_CLIENT_VERSION
    path: str = field(default="", repr=False, compare=False)

    @classmethod
    def load(cls, file_path: str) -> "Config":
        """
        Read settings from file_path. A missing file gives the defaults.
        Unknown keys are ignored; a file that is not a YAML mapping raises ValueError.
        """
        cfg = cls(path=file_path)
        if not os.path.isfile(file_path):
            return cfg
        with open(file_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"{file_path} is not valid YAML: {e}") from e
        if data is None:
            return cfg
        if not isinstance(data, dict):
            raise ValueError(f"{file_path} must contain key: value settings.")
        for fld in fields(cls):
            if fld.name == "path" or fld.name not in data:
                continue
            value = data[fld.name]
            setattr(cfg, fld.name, "" if value is None else str(value))
        cfg.patcher_url = cfg.patcher_url.rstrip("/")
        return cfg

    def save(self) -> None:
        """Write settings back to the file they were loaded from. Raises OSError."""
        if not self.path:
            raise OSError("config has no file path")
        data = asdict(self)
        data.pop("path")
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
