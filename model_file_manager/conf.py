# model_file_manager/conf.py
"""
Configuration for the file manager.

Values are resolved once, when the app registry is ready, in this order:

1. ``settings.MODEL_FILE_MANAGER`` dict (e.g. ``{'storage_disk': 's3'}``)
2. Environment variables (``MODEL_FILE_STORAGE_DISK`` etc.)
3. Literal defaults

The resulting ``FileManagerConfig`` is handed to stores and resolvers
explicitly; they never read settings on their own.
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


# ==============================================================================
# DEFAULTS
# ==============================================================================

DEFAULT_STORAGE_DISK = 'public'
DEFAULT_COLLECTION = 'default'
DEFAULT_RESIZED_IMAGE_PATH = 'resized/{width}x{height}/'

# setting name -> environment variable
ENV_VARS = {
    'storage_disk': 'MODEL_FILE_STORAGE_DISK',
    'default_collection': 'DEFAULT_FILE_COLLECTION',
    'resized_image_path': 'RESIZED_IMAGE_PATH',
    'strict_delete': 'MODEL_FILE_STRICT_DELETE',
}

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@dataclass(frozen=True)
class FileManagerConfig:
    """Settings shared by every file store."""

    storage_disk: str = DEFAULT_STORAGE_DISK
    default_collection: str = DEFAULT_COLLECTION
    resized_image_path: str = DEFAULT_RESIZED_IMAGE_PATH
    # Raise StorageDeleteError when deleting a blob that does not exist
    strict_delete: bool = False

    def __post_init__(self):
        # Derived keys are "<template dir>/<basename>"
        if self.resized_image_path and not self.resized_image_path.endswith('/'):
            object.__setattr__(self, 'resized_image_path', self.resized_image_path + '/')

    def with_overrides(self, **overrides) -> 'FileManagerConfig':
        """Return a copy with the given non-None fields replaced."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)

    @classmethod
    def load(
        cls,
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> 'FileManagerConfig':
        """
        Build a config from an overrides mapping and an environment.

        Args:
            overrides: Usually ``settings.MODEL_FILE_MANAGER``
            environ: Defaults to ``os.environ``
        """
        environ = os.environ if environ is None else environ
        overrides = dict(overrides or {})

        unknown = set(overrides) - set(ENV_VARS)
        if unknown:
            logger.warning(f"Ignoring unknown MODEL_FILE_MANAGER keys: {sorted(unknown)}")

        values: Dict[str, Any] = {}
        for name, env_var in ENV_VARS.items():
            if name in overrides:
                values[name] = overrides[name]
            elif environ.get(env_var):
                values[name] = environ[env_var]

        if isinstance(values.get('strict_delete'), str):
            values['strict_delete'] = values['strict_delete'].strip().lower() in TRUE_VALUES

        return cls(**values)


def get_config() -> FileManagerConfig:
    """Config built by the app's ready() hook."""
    from django.apps import apps

    return apps.get_app_config('model_file_manager').file_config
