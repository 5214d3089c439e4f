"""
Run log: timestamped lines kept in memory, echoed to stdout and to the window,
and written to <launcher>.txt at the end of the run so a failed patch can be reviewed later.
"""

import time
from typing import Callable


class PatchLog:
    def __init__(self, log_callback: Callable[[str], None] | None = None, echo: bool = True):
        self.lines: list[str] = []
        self.log_callback = log_callback
        self.echo = echo

    def __call__(self, msg: str) -> None:
        self.log(msg)

    def log(self, msg: str) -> None:
        line = f"[{time.strftime('%H:%M:%S')}] {msg}"
        self.lines.append(line)
        if self.echo:
            print(line, flush=True)
        if self.log_callback:
            self.log_callback(line)

    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines)

    def write(self, file_path: str) -> None:
        """Write the buffered log to file_path. Raises OSError."""
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(self.text())
