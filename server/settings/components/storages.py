"""Django storage configuration for S3-compatible backends.

This module configures django-storages to work with:
- Garage or MinIO for local development
- Any S3-compatible service in production

All of them use the same S3Storage-based backend.
"""

from typing import Any, Final

from server.settings.components import config

# Storage configuration dictionary
# Uses S3-compatible storage for images, local storage for static files
STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'images': {
        'BACKEND': (
            'server.apps.tierlists.infrastructure.storage.ImageStorage'
        ),
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='tiernow',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default=None),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            # Keys are random UUIDs, skip the existence probe on save
            'file_overwrite': True,
            'default_acl': None,  # Inherit bucket ACL
        },
    },
    'staticfiles': {
        # Keep static files separate from images
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
