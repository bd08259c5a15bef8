# model_file_manager/storage.py
"""
Disk adapter over Django's storage aliases.

A "disk" is a key of ``settings.STORAGES`` (``public``, ``default``, an S3
alias backed by django-storages, ...). ``Disk`` exposes the handful of calls
the file manager needs and turns backend failures into the app's
StorageWriteError / StorageReadError / StorageDeleteError.
"""

import logging
import os
import secrets
from typing import Union

from django.core.files import File
from django.core.files.base import ContentFile
from django.core.files.storage import Storage, storages

from .exceptions import StorageDeleteError, StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

# Length of generated file names, in hex characters
HASH_NAME_LENGTH = 40


def hash_name(original_name: str = '') -> str:
    """Random file name keeping the original extension: ``3f9c...e1.png``"""
    extension = os.path.splitext(os.path.basename(original_name or ''))[1].lower()
    return f"{secrets.token_hex(HASH_NAME_LENGTH // 2)}{extension}"


def as_django_file(payload) -> File:
    """Wrap raw bytes or a plain file object so storage.save() accepts it."""
    if isinstance(payload, File):
        return payload
    if isinstance(payload, (bytes, bytearray)):
        return ContentFile(bytes(payload))
    return File(payload)


class Disk:
    """One storage backend, addressed by its STORAGES alias."""

    def __init__(self, name: str, storage: Storage = None):
        self.name = name
        self.storage = storage if storage is not None else storages[name]

    def __repr__(self):
        return f"<Disk {self.name}>"

    # ==========================================================================
    # WRITES
    # ==========================================================================

    def store(self, payload: Union[File, bytes], directory: str) -> str:
        """
        Save an upload under ``directory`` with a generated name.

        Returns:
            The storage key the backend actually used
        """
        content = as_django_file(payload)
        target = f"{directory.strip('/')}/{hash_name(getattr(content, 'name', ''))}"
        try:
            path = self.storage.save(target, content)
        except Exception as exc:
            logger.error(f"Failed to store file on disk '{self.name}' under '{directory}': {exc}")
            raise StorageWriteError(
                f"Could not store file under '{directory}' on disk '{self.name}'",
                disk=self.name,
                path=target,
            ) from exc
        return path.replace('\\', '/')

    def put(self, path: str, data: bytes) -> str:
        """Write bytes at an exact key, replacing whatever is there."""
        try:
            if self.storage.exists(path):
                self.storage.delete(path)
            saved = self.storage.save(path, ContentFile(data))
        except Exception as exc:
            logger.error(f"Failed to write '{path}' on disk '{self.name}': {exc}")
            raise StorageWriteError(
                f"Could not write '{path}' on disk '{self.name}'",
                disk=self.name,
                path=path,
            ) from exc

        if saved != path:
            # Another writer created the key between delete and save
            logger.warning(f"Disk '{self.name}' stored '{path}' as '{saved}'")
        return saved

    def delete(self, path: str, missing_ok: bool = True) -> None:
        """
        Delete a blob.

        Deleting a missing key is left to the backend (a no-op for the
        filesystem and S3 backends) unless ``missing_ok`` is False.
        """
        if not missing_ok and not self.exists(path):
            raise StorageDeleteError(
                f"'{path}' does not exist on disk '{self.name}'",
                disk=self.name,
                path=path,
            )
        try:
            self.storage.delete(path)
        except Exception as exc:
            logger.error(f"Failed to delete '{path}' on disk '{self.name}': {exc}")
            raise StorageDeleteError(
                f"Could not delete '{path}' on disk '{self.name}'",
                disk=self.name,
                path=path,
            ) from exc

    # ==========================================================================
    # READS
    # ==========================================================================

    def get(self, path: str) -> bytes:
        try:
            with self.storage.open(path, 'rb') as fh:
                return fh.read()
        except Exception as exc:
            logger.error(f"Failed to read '{path}' on disk '{self.name}': {exc}")
            raise StorageReadError(
                f"Could not read '{path}' on disk '{self.name}'",
                disk=self.name,
                path=path,
            ) from exc

    def exists(self, path: str) -> bool:
        try:
            return self.storage.exists(path)
        except Exception as exc:
            raise StorageReadError(
                f"Could not check '{path}' on disk '{self.name}'",
                disk=self.name,
                path=path,
            ) from exc

    def url(self, path: str) -> str:
        return self.storage.url(path)
