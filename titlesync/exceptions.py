"""
Exceptions raised by titlesync.

Author: titlesync Project
License: MIT
"""


class TitleSyncError(Exception):
    """Base class for errors that abort a run."""


class InvalidPathError(TitleSyncError):
    """An origin or destination path does not exist or cannot be used."""


class DeviceNotFoundError(TitleSyncError):
    """No mounted device matches the request."""
