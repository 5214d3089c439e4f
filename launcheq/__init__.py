"""
launcheq: keeps an EverQuest client folder in sync with a patch server and updates itself.
"""

__version__ = "1.0.0"
