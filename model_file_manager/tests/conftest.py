"""
pytest configuration and fixtures for model_file_manager testing.

Provides:
- Per-test storage directories for the 'public' and 'default' disks
- Image payloads generated with Pillow
- In-memory records and saved test models
"""

import io
import json

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from model_file_manager.conf import FileManagerConfig
from model_file_manager.tests.testapp.models import Invoice, LegacyDocument


# ============================================================================
# STORAGE FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    """Point every disk at a fresh directory for each test."""
    settings.STORAGES = {
        "default": {
            "BACKEND": "django.core.files.storage.FileSystemStorage",
            "OPTIONS": {"location": tmp_path / 'default', "base_url": "/media/default/"},
        },
        "public": {
            "BACKEND": "django.core.files.storage.FileSystemStorage",
            "OPTIONS": {"location": tmp_path / 'public', "base_url": "/media/public/"},
        },
        "staticfiles": {
            "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
        },
    }
    return tmp_path


@pytest.fixture
def file_config():
    """Default file manager configuration."""
    return FileManagerConfig()


# ============================================================================
# PAYLOAD FIXTURES
# ============================================================================

def make_image_bytes(size=(200, 100), image_format='PNG', mode='RGB', color=(200, 30, 30)):
    """Encode a solid image of the given size."""
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def png_upload():
    """A 200x100 PNG upload."""
    return SimpleUploadedFile('photo.png', make_image_bytes(), content_type='image/png')


@pytest.fixture
def other_png_upload():
    """A second 50x50 PNG upload."""
    return SimpleUploadedFile('second.png', make_image_bytes((50, 50)), content_type='image/png')


@pytest.fixture
def text_upload():
    """A plain text upload."""
    return SimpleUploadedFile('notes.txt', b'not an image', content_type='text/plain')


# ============================================================================
# RECORD FIXTURES
# ============================================================================

class FakeRecord:
    """Minimal record storing the files map as JSON text."""

    def __init__(self, files=None):
        self.files = files
        self.save_count = 0
        self.fail_save = False

    def get_files_value(self):
        return self.files

    def set_files_value(self, value):
        self.files = json.dumps(value)

    def restore_files_value(self, raw):
        self.files = raw

    def save_files(self):
        if self.fail_save:
            raise RuntimeError("database unavailable")
        self.save_count += 1


@pytest.fixture
def record():
    """In-memory record with no files."""
    return FakeRecord()


@pytest.fixture
def invoice(db):
    """Saved Invoice with an empty files column."""
    return Invoice.objects.create(number="INV-001")


@pytest.fixture
def legacy_document(db):
    """Saved LegacyDocument (text files column, 'default' disk)."""
    return LegacyDocument.objects.create(title="Contract")
