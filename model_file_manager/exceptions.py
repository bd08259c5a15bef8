# model_file_manager/exceptions.py
"""
Error kinds raised by the file manager.

Storage errors wrap the backend exception that caused them (``raise ... from``)
and remember which disk and key were involved.
"""


class FileManagerError(Exception):
    """Base class for every error raised by this app."""


class StorageError(FileManagerError):
    """A storage backend call failed."""

    def __init__(self, message, disk=None, path=None):
        super().__init__(message)
        self.disk = disk
        self.path = path


class StorageWriteError(StorageError):
    pass


class StorageReadError(StorageError):
    pass


class StorageDeleteError(StorageError):
    pass


class DecodeError(FileManagerError):
    """Source bytes could not be decoded as an image."""


class MigrationFileNotFound(FileManagerError):
    """No migration script was found after running makemigrations."""
