"""Shared fixtures for tierlists app tests."""

import boto3
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from moto import mock_aws

from server.apps.tierlists.infrastructure.context import StoreContext
from server.apps.tierlists.infrastructure.queries import MetadataStore
from server.apps.tierlists.infrastructure.storage import ImageStorage
from server.apps.tierlists.logic.tierlist_operations import create_tierlist

BUCKET_NAME = 'tiernow'

# Smallest valid PNG (1x1 transparent pixel)
_PNG_BYTES = (
    b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01'
    b'\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\xff'
    b'\xff?\x00\x05\xfe\x02\xfe\xa7\x35\x81\x84\x00\x00\x00\x00IEND\xaeB`\x82'
)


@pytest.fixture
def mock_s3():
    """Mock S3 service with tiernow bucket.

    Yields:
        boto3 S3 resource with tiernow bucket created.
    """
    with mock_aws():
        # Create S3 resource
        conn = boto3.resource('s3', region_name='us-east-1')

        # Create bucket
        conn.create_bucket(Bucket=BUCKET_NAME)

        yield conn


@pytest.fixture
def bucket(mock_s3):
    """Mocked tiernow bucket.

    Returns:
        boto3 Bucket resource.
    """
    return mock_s3.Bucket(BUCKET_NAME)


@pytest.fixture
def image_storage(mock_s3):
    """Create image storage bound to the mocked bucket.

    Returns:
        ImageStorage instance.
    """
    return ImageStorage(
        bucket_name=BUCKET_NAME,
        region_name='us-east-1',
        file_overwrite=True,
    )


@pytest.fixture
def stores(db, image_storage):
    """Create store context over mocked S3 and the test database.

    Returns:
        StoreContext with a 10 MiB upload ceiling.
    """
    return StoreContext(
        blobs=image_storage,
        metadata=MetadataStore(),
        max_upload_bytes=10 * 1024 * 1024,
    )


@pytest.fixture
def tierlist(stores):
    """Create tierlist with the default tiers.

    Returns:
        Tierlist payload as returned by create_tierlist.
    """
    return create_tierlist(stores, 'Best snacks')


@pytest.fixture
def other_tierlist(stores):
    """Create second tierlist for cross-tierlist tests.

    Returns:
        Tierlist payload as returned by create_tierlist.
    """
    return create_tierlist(stores, 'Worst snacks')


@pytest.fixture
def png_upload():
    """Sample PNG upload with an upper-case extension.

    Returns:
        SimpleUploadedFile with image/png content type.
    """
    return SimpleUploadedFile(
        'Pretzel.PNG',
        _PNG_BYTES,
        content_type='image/png',
    )


@pytest.fixture
def png_bytes():
    """Raw bytes of a 1x1 PNG.

    Returns:
        PNG file content.
    """
    return _PNG_BYTES


@pytest.fixture
def stored_keys(bucket):
    """Helper listing every key stored in the mocked bucket.

    Returns:
        Callable returning the sorted list of keys.
    """
    def _stored_keys() -> list[str]:  # noqa: WPS430
        return sorted(summary.key for summary in bucket.objects.all())

    return _stored_keys
