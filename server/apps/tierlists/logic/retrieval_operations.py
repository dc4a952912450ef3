"""Business logic for image retrieval."""

import logging
from dataclasses import dataclass

from botocore.response import StreamingBody

from server.apps.tierlists.exceptions import BlobNotFoundError
from server.apps.tierlists.infrastructure.context import StoreContext
from server.apps.tierlists.infrastructure.metadata import (
    build_object_key,
    is_valid_file_key,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImageBlob:
    """Open image handle ready to be streamed.

    The consumer must close ``body`` once streaming ends.
    """

    body: StreamingBody
    content_type: str
    size_bytes: int


def open_image(stores: StoreContext, file_key: str) -> ImageBlob:
    """Open an image blob together with its stored content type.

    The object fetch and the metadata lookup are independent calls,
    either one failing is reported as not found. The body is closed
    before raising when the metadata lookup fails.

    Args:
        stores: Store context.
        file_key: Key returned by the upload ('<uuid>.<ext>').

    Returns:
        ImageBlob owning the open body.

    Raises:
        BlobNotFoundError: If the blob or its metadata cannot be fetched.
    """
    if not is_valid_file_key(file_key):
        logger.warning('Rejected image key: %r', file_key)
        raise BlobNotFoundError(file_key)

    object_key = build_object_key(file_key)

    try:
        body = stores.blobs.open_blob(object_key)
    except Exception as error:
        logger.exception('Failed to retrieve image: %s', object_key)
        raise BlobNotFoundError(file_key) from error

    try:
        stat = stores.blobs.stat_blob(object_key)
    except Exception as error:
        body.close()
        logger.exception('Failed to retrieve image metadata: %s', object_key)
        raise BlobNotFoundError(file_key) from error

    logger.info(
        'Retrieved image %s with content type: %s',
        object_key,
        stat.content_type,
    )
    return ImageBlob(
        body=body,
        content_type=stat.content_type,
        size_bytes=stat.size_bytes,
    )
