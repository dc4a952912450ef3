"""Integration tests for Garage S3 storage.

These tests verify that Garage is properly configured and accessible
when running in Docker Compose, first through the raw S3 API and then
through the image storage backend.
"""
import os
import uuid
from typing import Final

import boto3
import pytest
from botocore.client import BaseClient
from botocore.exceptions import ClientError

from server.apps.tierlists.infrastructure.storage import ImageStorage

_TEST_BUCKET: Final = os.getenv('AWS_STORAGE_BUCKET_NAME', 'tiernow')
_TEST_CONTENT: Final = b'Hello from Garage integration test!'
_ENDPOINT: Final = os.getenv('AWS_S3_ENDPOINT_URL', 'http://tiernow-garage:3900')
_REGION: Final = os.getenv('AWS_S3_REGION_NAME', 'garage')


@pytest.fixture
def s3_client() -> BaseClient:
    """Create S3 client for Garage.

    Returns:
        Configured boto3 S3 client for Garage.
    """
    return boto3.client(
        's3',
        endpoint_url=_ENDPOINT,
        aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
        aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
        region_name=_REGION,
    )


@pytest.fixture
def object_key(s3_client: BaseClient):
    """Random key under the images folder, removed after the test.

    Yields:
        Full object key.
    """
    key = f'images/{uuid.uuid4()}.txt'
    yield key
    s3_client.delete_object(Bucket=_TEST_BUCKET, Key=key)


@pytest.mark.integration
def test_bucket_exists(s3_client: BaseClient) -> None:
    """Test that the images bucket is reachable."""
    response = s3_client.head_bucket(Bucket=_TEST_BUCKET)
    assert response['ResponseMetadata']['HTTPStatusCode'] == 200


@pytest.mark.integration
def test_content_type_is_kept(
    s3_client: BaseClient,
    object_key: str,
) -> None:
    """Test content type given on put comes back on head and get.

    Args:
        s3_client: boto3 S3 client.
        object_key: Key to write.
    """
    s3_client.put_object(
        Bucket=_TEST_BUCKET,
        Key=object_key,
        Body=_TEST_CONTENT,
        ContentType='text/plain',
    )

    head = s3_client.head_object(Bucket=_TEST_BUCKET, Key=object_key)
    assert head['ContentType'] == 'text/plain'
    assert head['ContentLength'] == len(_TEST_CONTENT)

    response = s3_client.get_object(Bucket=_TEST_BUCKET, Key=object_key)
    assert response['Body'].read() == _TEST_CONTENT


@pytest.mark.integration
def test_image_storage_round_trip(
    s3_client: BaseClient,
    object_key: str,
) -> None:
    """Test the storage backend can list, stat and open a blob.

    Args:
        s3_client: boto3 S3 client.
        object_key: Key to write.
    """
    s3_client.put_object(
        Bucket=_TEST_BUCKET,
        Key=object_key,
        Body=_TEST_CONTENT,
        ContentType='text/plain',
    )
    storage = ImageStorage(
        bucket_name=_TEST_BUCKET,
        endpoint_url=_ENDPOINT,
        region_name=_REGION,
        access_key=os.getenv('AWS_ACCESS_KEY_ID'),
        secret_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
    )

    assert object_key in {key for key, _ in storage.list_blobs('images/')}
    assert storage.stat_blob(object_key).content_type == 'text/plain'
    body = storage.open_blob(object_key)
    try:
        assert body.read() == _TEST_CONTENT
    finally:
        body.close()


@pytest.mark.integration
def test_missing_object(s3_client: BaseClient) -> None:
    """Test that a missing key is reported as 404."""
    with pytest.raises(ClientError) as exc_info:
        s3_client.head_object(Bucket=_TEST_BUCKET, Key='images/missing.png')

    assert exc_info.value.response['Error']['Code'] == '404'
