"""Custom storage backend for S3-compatible object storage."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any, final, override

from botocore.response import StreamingBody
from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BlobStat:
    """Object metadata returned by a HEAD request."""

    content_type: str
    size_bytes: int


@final
class ImageStorage(S3Storage):
    """S3 storage backend for tierlist images.

    Adds logging around writes and deletes, a best-effort rollback used
    after a failed metadata insert, and the raw get, head and list calls
    needed by retrieval and reconciliation.
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Write an image blob.

        The content type is taken from ``content.content_type`` when set,
        otherwise guessed from the key.

        Args:
            name: Object key (e.g., 'images/<uuid>.png').
            content: Uploaded file or other file-like object.
            max_length: Optional maximum length for the key.

        Returns:
            Object key written.
        """
        logger.info(
            'Writing blob %s (%s, %s bytes)',
            name,
            getattr(content, 'content_type', None) or 'guessed type',
            getattr(content, 'size', '?'),
        )
        try:
            return super().save(name, content, max_length)
        except Exception:
            logger.exception('Blob write failed: %s', name)
            raise

    @override
    def delete(self, name: str) -> None:
        """Delete a blob, logging failures before re-raising.

        Args:
            name: Object key to delete.
        """
        logger.info('Deleting blob: %s', name)
        try:
            super().delete(name)
        except Exception:
            logger.exception('Blob delete failed: %s', name)
            raise

    def rollback_upload(self, name: str) -> None:
        """Remove a blob whose entry row could not be inserted.

        Never raises. A blob that cannot be removed here stays orphaned
        until ``reconcile_blobs`` deletes it.

        Args:
            name: Object key written by the failed upload.
        """
        logger.warning('Rolling back blob upload: %s', name)
        try:
            self.delete(name)
        except Exception:
            logger.exception('Rollback failed, blob left orphaned: %s', name)

    def open_blob(self, name: str) -> StreamingBody:
        """Open blob body for streaming.

        The caller owns the returned handle and must close it.

        Args:
            name: Storage key of the blob.

        Returns:
            Streaming body of the object.

        Raises:
            botocore.exceptions.ClientError: If the object cannot be fetched.
        """
        response = self.bucket.Object(name).get()
        return response['Body']

    def stat_blob(self, name: str) -> BlobStat:
        """Fetch stored content type and size of a blob.

        Args:
            name: Storage key of the blob.

        Returns:
            BlobStat with content type captured at upload time.

        Raises:
            botocore.exceptions.ClientError: If the object does not exist.
        """
        response = self.connection.meta.client.head_object(
            Bucket=self.bucket_name,
            Key=name,
        )
        return BlobStat(
            content_type=response.get('ContentType') or (
                self.default_content_type
            ),
            size_bytes=response['ContentLength'],
        )

    def list_blobs(self, prefix: str) -> Iterator[tuple[str, datetime]]:
        """Iterate over all keys under a prefix.

        Args:
            prefix: Key prefix (e.g., 'images/').

        Yields:
            Tuples of (key, last_modified).
        """
        for summary in self.bucket.objects.filter(Prefix=prefix):
            yield summary.key, summary.last_modified
