# model_file_manager/mixins.py
"""
Model mixin exposing file collections on a Django model.

The model declares the column itself (``add_file_field`` generates the
migration):

    class Invoice(HasFiles, models.Model):
        files = models.JSONField(null=True, blank=True)

        storage_disk = 's3'   # optional, defaults to MODEL_FILE_STORAGE_DISK
"""

import json
from typing import Optional

from django.core.exceptions import FieldDoesNotExist
from django.db import models

from .conf import get_config
from .store import CollectionMap, FileCollectionStore


class HasFiles:
    """Adds upload/delete/replace/query of named file collections."""

    files_field = 'files'
    storage_disk: Optional[str] = None

    # ==========================================================================
    # COLUMN ACCESS
    # ==========================================================================

    def get_files_value(self):
        return getattr(self, self.files_field, None)

    def set_files_value(self, value: CollectionMap) -> None:
        """Store a dict in JSONField columns, JSON text in anything else."""
        try:
            field = self._meta.get_field(self.files_field)
        except (AttributeError, FieldDoesNotExist):
            field = None

        if field is not None and not isinstance(field, models.JSONField):
            value = json.dumps(value)
        setattr(self, self.files_field, value)

    def restore_files_value(self, raw) -> None:
        """Put back a value read by get_files_value(), without re-encoding."""
        setattr(self, self.files_field, raw)

    def save_files(self) -> None:
        if self.pk is not None and not self._state.adding:
            self.save(update_fields=[self.files_field])
        else:
            self.save()

    @property
    def file_store(self) -> FileCollectionStore:
        return FileCollectionStore(self, get_config().with_overrides(storage_disk=self.storage_disk))

    # ==========================================================================
    # FILE OPERATIONS
    # ==========================================================================

    def upload_file(self, file, collection=None, disk=None):
        self.file_store.upload_file(file, collection, disk)

    def delete_file(self, path, collection=None, disk=None):
        self.file_store.delete_file(path, collection, disk)

    def get_files(self):
        return self.file_store.get_files()

    def get_files_from_collection(self, collection=None, width=None, height=None, disk=None):
        return self.file_store.get_files_from_collection(collection, width, height, disk)

    def get_first_file_from_collection(self, collection=None, width=None, height=None, disk=None):
        return self.file_store.get_first_file_from_collection(collection, width, height, disk)

    def replace_file_in_collection(self, new_file, collection=None, disk=None):
        self.file_store.replace_file_in_collection(new_file, collection, disk)
