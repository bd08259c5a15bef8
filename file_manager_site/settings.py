from pathlib import Path
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# ==============================================================================
# SECURITY SETTINGS (ENVIRONMENT-BASED)
# ==============================================================================

# Load from .env; fall back to insecure default for development only
SECRET_KEY = os.getenv(
    'DJANGO_SECRET_KEY',
    'django-insecure-model-file-manager-development-key'
)

DEBUG = os.getenv('DEBUG', 'True') == 'True'

ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', '*').split(',')


# ==============================================================================
# APPLICATION CONFIGURATION
# ==============================================================================

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.staticfiles',

    # Third-party apps
    'storages',  # django-storages for S3/DO Spaces

    # Local apps
    'model_file_manager',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'file_manager_site.urls'


# ==============================================================================
# DATABASE CONFIGURATION
# ==============================================================================
# Supports DATABASE_URL (Railway/Heroku) or SQLite

import dj_database_url

DATABASE_URL = os.getenv('DATABASE_URL', '')

if DATABASE_URL:
    DATABASES = {
        'default': dj_database_url.config(
            default=DATABASE_URL,
            conn_max_age=600,
            conn_health_checks=True,
        )
    }
else:
    # Default: SQLite for local development
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }


# ==============================================================================
# FILE STORAGE CONFIGURATION
# ==============================================================================
# Every STORAGES alias is a "disk" the file manager can write to.
# 'public' is the default disk (MODEL_FILE_STORAGE_DISK).

STORAGE_TYPE = os.getenv('STORAGE_TYPE', 'local')

MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

if STORAGE_TYPE in ('s3', 'r2'):
    # AWS S3, Cloudflare R2, or DigitalOcean Spaces (all S3-compatible)
    S3_OPTIONS = {
        "access_key": os.getenv('AWS_ACCESS_KEY_ID', ''),
        "secret_key": os.getenv('AWS_SECRET_ACCESS_KEY', ''),
        "bucket_name": os.getenv('AWS_STORAGE_BUCKET_NAME', 'model-files'),
        "region_name": os.getenv('AWS_S3_REGION_NAME', 'us-east-1'),
        # For DO Spaces or custom S3 endpoint:
        "endpoint_url": os.getenv('AWS_S3_ENDPOINT_URL', None),
        "file_overwrite": False,
    }
    STORAGES = {
        "default": {
            "BACKEND": "storages.backends.s3boto3.S3Boto3Storage",
            "OPTIONS": {**S3_OPTIONS, "default_acl": "private"},
        },
        "public": {
            "BACKEND": "storages.backends.s3boto3.S3Boto3Storage",
            "OPTIONS": {**S3_OPTIONS, "default_acl": "public-read", "querystring_auth": False},
        },
        "staticfiles": {
            "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
        },
    }
    AWS_S3_SIGNATURE_VERSION = 's3v4'
else:
    STORAGES = {
        "default": {
            "BACKEND": "django.core.files.storage.FileSystemStorage",
        },
        "public": {
            "BACKEND": "django.core.files.storage.FileSystemStorage",
            "OPTIONS": {
                "location": MEDIA_ROOT / 'public',
                "base_url": f"{MEDIA_URL}public/",
            },
        },
        "staticfiles": {
            "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
        },
    }


# ==============================================================================
# MODEL FILE MANAGER
# ==============================================================================
# Environment variables MODEL_FILE_STORAGE_DISK, DEFAULT_FILE_COLLECTION,
# RESIZED_IMAGE_PATH and MODEL_FILE_STRICT_DELETE are read when the app loads.
# Keys set here take precedence over them.

MODEL_FILE_MANAGER = {}


# ==============================================================================
# INTERNATIONALIZATION
# ==============================================================================

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True


# ==============================================================================
# LOGGING CONFIGURATION
# ==============================================================================

LOGS_DIR = BASE_DIR / 'logs'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {asctime} {message}',
            'style': '{',
        },
    },
    'filters': {
        'require_debug_true': {
            '()': 'django.utils.log.RequireDebugTrue',
        },
    },
    'handlers': {
        'console': {
            'level': 'DEBUG',
            'filters': ['require_debug_true'],
            'class': 'logging.StreamHandler',
            'formatter': 'simple'
        },
        'file': {
            'level': 'INFO',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': LOGS_DIR / 'model_file_manager.log',
            'maxBytes': 5 * 1024 * 1024,
            'backupCount': 3,
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console', 'file'],
            'level': 'INFO',
        },
        'model_file_manager': {
            'handlers': ['console', 'file'],
            'level': 'DEBUG',
        },
    },
}

# Ensure logs directory exists
LOGS_DIR.mkdir(exist_ok=True)


# ==============================================================================
# DEFAULT PRIMARY KEY
# ==============================================================================

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
