"""Business logic for image uploads."""

import logging

from django.core.files.uploadedfile import UploadedFile
from django.db import DatabaseError

from server.apps.tierlists.exceptions import (
    BlobWriteFailedError,
    MetadataWriteFailedError,
    MissingFileError,
    PayloadTooLargeError,
)
from server.apps.tierlists.infrastructure.context import StoreContext
from server.apps.tierlists.infrastructure.metadata import (
    build_object_key,
    extract_file_key,
    generate_file_key,
)
from server.apps.tierlists.models import Entry

logger = logging.getLogger(__name__)


def check_upload_size(stores: StoreContext, size_bytes: int | None) -> None:
    """Reject uploads above the configured ceiling.

    Args:
        stores: Store context carrying the ceiling.
        size_bytes: Declared or measured size, None if unknown.

    Raises:
        PayloadTooLargeError: If the size exceeds the ceiling.
    """
    if size_bytes is not None and size_bytes > stores.max_upload_bytes:
        raise PayloadTooLargeError(size_bytes, stores.max_upload_bytes)


def upload_entry(
    stores: StoreContext,
    tierlist_uuid: str,
    upload: UploadedFile | None,
) -> Entry:
    """Store an image blob and create its unassigned entry.

    Ordering: validate, generate key, write blob, insert entry.
    Nothing is written when validation or key generation fails. A blob
    write failure aborts before any metadata is written. When the entry
    insert fails, the blob is deleted on a best-effort basis; if that
    delete fails too the blob stays orphaned until reconciliation.

    Args:
        stores: Store context.
        tierlist_uuid: Tierlist receiving the entry.
        upload: Uploaded file with declared name and content type.

    Returns:
        Created Entry instance (id and file_key).

    Raises:
        MissingFileError: If no file was sent.
        PayloadTooLargeError: If the file exceeds the upload ceiling.
        MalformedFilenameError: If the filename has no extension.
        BlobWriteFailedError: If object storage rejects the write.
        MetadataWriteFailedError: If the entry row cannot be inserted.
    """
    if upload is None:
        raise MissingFileError
    check_upload_size(stores, upload.size)

    file_key = generate_file_key(upload.name or '')
    object_key = build_object_key(file_key)

    # Step 1: Upload to storage first
    try:
        saved_key = stores.blobs.save(object_key, upload)
    except Exception as error:
        logger.exception(
            'Failed to upload image for tierlist %s: %s',
            tierlist_uuid,
            object_key,
        )
        raise BlobWriteFailedError(
            "Error when uploading: Couldn't upload to storage",
        ) from error

    # Storage may have written under another key than requested
    file_key = extract_file_key(saved_key)

    # Step 2: Create database record
    try:
        entry = stores.metadata.create_entry(tierlist_uuid, file_key)
    except DatabaseError as error:
        logger.exception(
            'Failed to create image metadata for tierlist %s: %s',
            tierlist_uuid,
            file_key,
        )
        stores.blobs.rollback_upload(saved_key)
        raise MetadataWriteFailedError(
            "Error when uploading: Couldn't save metadata",
        ) from error

    logger.info(
        'Entry created for tierlist %s: %s (ID: %d)',
        tierlist_uuid,
        file_key,
        entry.id,
    )
    return entry
