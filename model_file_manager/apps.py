import logging

from django.apps import AppConfig
from django.conf import settings

from .conf import FileManagerConfig

logger = logging.getLogger(__name__)


class ModelFileManagerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'model_file_manager'
    verbose_name = 'Model File Manager'

    def ready(self):
        self.file_config = FileManagerConfig.load(getattr(settings, 'MODEL_FILE_MANAGER', None))
        logger.debug(
            f"File manager ready: disk={self.file_config.storage_disk} "
            f"collection={self.file_config.default_collection}"
        )
