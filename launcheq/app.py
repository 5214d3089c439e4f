"""
launcheq window: a live view of the patch run for players who start the launcher by double-click.
The run itself is Client.run on a worker thread; the window only shows its log lines and progress.
"""

import os
import threading

import customtkinter as ctk

from launcheq.client import DEFAULT_BASE_NAME, Client, frozen_executable
from launcheq.config import Config
from launcheq.selfupdate import exe_base_name
from launcheq.validator import validate_run_dir

WINDOW_SIZE = "560x360"


class LauncherWindow(ctk.CTk):
    def __init__(self, root_path: str):
        super().__init__()
        self.root_path = root_path
        self.exe_path = frozen_executable()
        self.base_name = exe_base_name(self.exe_path) if self.exe_path else DEFAULT_BASE_NAME
        self.running = False

        self.title(f"{self.base_name} - {root_path}")
        self.geometry(WINDOW_SIZE)
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self.log_view = ctk.CTkTextbox(self, font=ctk.CTkFont(family="Consolas", size=12), wrap="none")
        self.log_view.grid(row=0, column=0, columnspan=2, sticky="nsew", padx=6, pady=(6, 3))
        self.log_view.configure(state="disabled")

        self.bar = ctk.CTkProgressBar(self)
        self.bar.grid(row=1, column=0, columnspan=2, sticky="ew", padx=6)
        self.bar.set(0)

        self.status = ctk.CTkLabel(self, text="", anchor="w")
        self.status.grid(row=2, column=0, sticky="ew", padx=6, pady=6)
        self.action = ctk.CTkButton(self, text="Retry", width=72, command=self.start)
        self.action.grid(row=2, column=1, padx=6, pady=6)
        self.action.grid_remove()

    def append(self, line: str):
        self.log_view.configure(state="normal")
        self.log_view.insert("end", line + "\n")
        self.log_view.see("end")
        self.log_view.configure(state="disabled")

    def progress(self, current: int, total: int, name: str):
        self.bar.set(current / total if total else 1)
        self.status.configure(text=f"{current}/{total} {name}")

    def start(self):
        """Validate the folder, then run the patch in the background."""
        if self.running:
            return
        ok, msg = validate_run_dir(self.root_path, self.base_name)
        if not ok:
            for line in msg.splitlines():
                self.append(line)
            self.status.configure(text="Not an EverQuest folder.")
            return
        try:
            config = Config.load(os.path.join(self.root_path, f"{self.base_name}.yml"))
        except (OSError, ValueError) as e:
            self.append(str(e))
            self.status.configure(text=f"Fix {self.base_name}.yml and retry.")
            self.action.grid()
            return

        self.running = True
        self.action.grid_remove()
        self.bar.set(0)
        self.status.configure(text="Patching…")
        client = Client(
            config,
            self.root_path,
            exe_path=self.exe_path,
            log_callback=lambda line: self.after(0, self.append, line),
            progress_callback=lambda c, t, n: self.after(0, self.progress, c, t, n),
        )
        threading.Thread(target=lambda: self.finish(client.run()), daemon=True).start()

    def finish(self, exit_code: int):
        self.after(0, self._finished, exit_code)

    def _finished(self, exit_code: int):
        self.running = False
        self.bar.set(1)
        if exit_code == 0:
            self.status.configure(text="Up to date.")
            return
        self.status.configure(text=f"Patch failed, see {self.base_name}.txt.")
        self.action.grid()


def main():
    ctk.set_appearance_mode("dark")
    window = LauncherWindow(os.getcwd())
    window.after(100, window.start)
    window.mainloop()


if __name__ == "__main__":
    main()
