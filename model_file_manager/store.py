# model_file_manager/store.py
"""
File collections stored on a single record.

The record keeps a JSON map in its ``files`` column:

    {"avatars": [{"path": "avatars/3f9c...e1.png"}], "documents": [...]}

``FileCollectionStore`` reads and mutates that map and delegates blob I/O to a
``Disk``. Each mutation ends with exactly one save of the record. Storage and
database writes are not atomic: a blob stored before a failing save is left
behind, and a blob deleted before a failing save leaves a stale entry.

Usage:
    store = FileCollectionStore(invoice, get_config())
    store.upload_file(upload, 'documents')
    store.get_first_file_from_collection('documents')
"""

import copy
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

from .conf import FileManagerConfig
from .images import ResizedVariantResolver
from .storage import Disk

logger = logging.getLogger(__name__)

FileEntry = Dict[str, Any]
CollectionMap = Dict[str, List[FileEntry]]


class FilesRecord(Protocol):
    """What a record must offer to carry file collections."""

    def get_files_value(self) -> Any:
        ...

    def set_files_value(self, value: CollectionMap) -> None:
        ...

    def restore_files_value(self, raw: Any) -> None:
        ...

    def save_files(self) -> None:
        ...


def decode_files(value: Any) -> CollectionMap:
    """
    Decode a raw ``files`` column value.

    None, empty strings and JSON null all decode to an empty map, as does
    anything that is not a JSON object.
    """
    if value is None or value == '' or value == b'':
        return {}
    if isinstance(value, (str, bytes, bytearray)):
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("Ignoring undecodable files column value")
            return {}
    if not value:
        return {}
    if not isinstance(value, Mapping):
        logger.warning(f"Ignoring files column value of type {type(value).__name__}")
        return {}
    return {name: list(entries or []) for name, entries in value.items()}


class FileCollectionStore:
    """CRUD over the file collections of one record."""

    def __init__(
        self,
        record: FilesRecord,
        config: FileManagerConfig,
        disk: Optional[str] = None,
        resolver: Optional[ResizedVariantResolver] = None,
    ):
        self.record = record
        self.config = config
        self.disk_name = disk or config.storage_disk
        self.resolver = resolver or ResizedVariantResolver(config)

    # ==========================================================================
    # DEFAULTS
    # ==========================================================================

    def _collection(self, collection: Optional[str]) -> str:
        return collection or self.config.default_collection

    def _disk(self, disk: Optional[str]) -> Disk:
        return Disk(disk or self.disk_name)

    # ==========================================================================
    # READS
    # ==========================================================================

    def get_files(self) -> CollectionMap:
        """All collections, or an empty dict when the record has none."""
        return copy.deepcopy(decode_files(self.record.get_files_value()))

    def get_files_from_collection(
        self,
        collection: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        disk: Optional[str] = None,
    ) -> List[Union[FileEntry, str]]:
        """
        Entries of one collection in upload order.

        When both width and height are given, the URLs of resized variants are
        returned instead. A single dimension is ignored.
        """
        entries = self.get_files().get(self._collection(collection), [])

        if width and height:
            resolved_disk = self._disk(disk)
            return [
                self.resolver.resolve(resolved_disk, entry['path'], width, height)
                for entry in entries
            ]

        return entries

    def get_first_file_from_collection(
        self,
        collection: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        disk: Optional[str] = None,
    ) -> Optional[Union[FileEntry, str]]:
        files = self.get_files_from_collection(collection, width, height, disk)
        return files[0] if files else None

    # ==========================================================================
    # MUTATIONS
    # ==========================================================================

    def upload_file(self, file, collection: Optional[str] = None, disk: Optional[str] = None) -> None:
        """
        Store a file and append it to a collection.

        Args:
            file: Django File/UploadedFile, or raw bytes
            collection: Collection name (configured default when omitted)
            disk: STORAGES alias (record's disk when omitted)
        """
        collection = self._collection(collection)
        resolved_disk = self._disk(disk)

        path = resolved_disk.store(file, collection)

        files = self.get_files()
        files.setdefault(collection, []).append({'path': path})
        self._write(files)

        logger.info(f"Uploaded {path} to collection '{collection}' on {resolved_disk.name}")

    def delete_file(self, path: str, collection: Optional[str] = None, disk: Optional[str] = None) -> None:
        """Delete a blob, then drop every entry pointing at it."""
        collection = self._collection(collection)
        resolved_disk = self._disk(disk)

        resolved_disk.delete(path, missing_ok=not self.config.strict_delete)

        files = self.get_files()
        if collection in files:
            files[collection] = [entry for entry in files[collection] if entry.get('path') != path]
        self._write(files)

        logger.info(f"Deleted {path} from collection '{collection}' on {resolved_disk.name}")

    def replace_file_in_collection(self, new_file, collection: Optional[str] = None, disk: Optional[str] = None) -> None:
        """Swap the collection's first file for a new upload."""
        collection = self._collection(collection)

        old_file = self.get_first_file_from_collection(collection)
        if old_file:
            self.delete_file(old_file['path'], collection, disk)

        self.upload_file(new_file, collection, disk)

    def _write(self, files: CollectionMap) -> None:
        """Assign the new map and save once; on failure put the raw old value back."""
        previous = self.record.get_files_value()
        self.record.set_files_value(files)
        try:
            self.record.save_files()
        except Exception:
            self.record.restore_files_value(previous)
            raise
