"""
Run directory check: the launcher patches the folder it is started from, so refuse
user profile folders where a freshly downloaded launcher usually sits.
"""

import os

BLOCKED_FOLDERS = ("Downloads", "Documents", "Desktop")

MSG_BLOCKED_FOLDER = (
    "You are running {name} from your {folder} folder. This is not recommended.\n"
    "Please move {name} to a different folder, such as C:\\Games\\EverQuest."
)


def validate_run_dir(root_path: str | None = None, name: str = "launcheq") -> tuple[bool, str]:
    """
    Verify that root_path (or cwd) is not a Downloads, Documents or Desktop folder.

    Returns:
        (success: bool, message: str)
        On failure, message is a user-friendly error string.
    """
    end_path = (root_path or os.getcwd()).rstrip("/\\")
    for folder in BLOCKED_FOLDERS:
        if end_path.endswith(folder):
            return False, MSG_BLOCKED_FOLDER.format(name=name, folder=folder)
    return True, ""
