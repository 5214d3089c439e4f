"""
Exception types raised by the patcher.

Component code raises these; the client decides which ones end the run.
Manifest and self-update failures are soft, PatchError and QuarantineError are not.
"""


class LaunchEQError(Exception):
    """Base class for every patcher error."""


class ManifestError(LaunchEQError):
    """The remote file list could not be used."""


class ManifestUnavailableError(ManifestError):
    """Both file list URLs failed, or the server answered with something other than 200."""


class ManifestParseError(ManifestError):
    """The file list body is not a YAML mapping."""


class PatchError(LaunchEQError):
    """Synchronization of the game directory had to stop."""


class DownloadError(PatchError):
    """A patch file or the maps archive could not be downloaded."""


class ArchiveError(PatchError):
    """A downloaded archive could not be expanded."""


class SelfUpdateError(LaunchEQError):
    """Checking for or applying a new launcher build failed."""


class QuarantineError(SelfUpdateError):
    """
    Windows refused to write the new launcher because antivirus flagged it.

    The user has to restore the file from quarantine, so this one stops the run.
    """
