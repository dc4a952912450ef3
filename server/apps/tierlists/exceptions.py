"""Exceptions for tierlists app.

Every error carries the HTTP status and the machine-readable code
used by the views to render the ``{"error": {...}}`` payload.
"""

from typing import ClassVar


class TierlistError(Exception):
    """Base class for all tierlist catalog errors."""

    status_code: ClassVar[int] = 500
    code: ClassVar[str] = 'INTERNAL_ERROR'


# Validation errors (malformed input)


class RequestValidationError(TierlistError):
    """Raised when client input is malformed."""

    status_code = 400
    code = 'VALIDATION_ERROR'


class MalformedFilenameError(RequestValidationError):
    """Raised when an uploaded filename has no extension."""

    code = 'MALFORMED_FILENAME'

    def __init__(self, filename: str) -> None:
        """Initialize MalformedFilenameError.

        Args:
            filename: Declared name of the uploaded file.
        """
        self.filename = filename
        super().__init__(f'Filename has no extension: {filename!r}')


class MissingFileError(RequestValidationError):
    """Raised when the upload request carries no image field."""

    code = 'MISSING_FILE'

    def __init__(self) -> None:
        """Initialize MissingFileError."""
        super().__init__("Couldn't retrieve file from request")


class PayloadTooLargeError(RequestValidationError):
    """Raised when an upload exceeds the size ceiling."""

    status_code = 413
    code = 'PAYLOAD_TOO_LARGE'

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        """Initialize PayloadTooLargeError.

        Args:
            size_bytes: Size of the rejected upload.
            limit_bytes: Configured upload ceiling.
        """
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f'Upload of {size_bytes} bytes exceeds limit of '
            f'{limit_bytes} bytes',
        )


class MalformedBodyError(RequestValidationError):
    """Raised when a JSON request body has the wrong shape."""

    code = 'MALFORMED_BODY'


class InvalidNameError(RequestValidationError):
    """Raised when a tierlist name is rejected."""

    code = 'INVALID_NAME'


class TierScopeError(RequestValidationError):
    """Raised when an entry would move into another tierlist's tier."""

    code = 'TIER_SCOPE_VIOLATION'

    def __init__(self, entry_id: int, tier_id: int) -> None:
        """Initialize TierScopeError.

        Args:
            entry_id: Entry being moved.
            tier_id: Target tier outside the entry's tierlist.
        """
        self.entry_id = entry_id
        self.tier_id = tier_id
        super().__init__(
            f'Tier {tier_id} does not belong to the tierlist '
            f'of entry {entry_id}',
        )


# Not found errors


class NotFoundError(TierlistError):
    """Raised when a tierlist, entry or blob does not exist."""

    status_code = 404
    code = 'NOT_FOUND'


class TierlistNotFoundError(NotFoundError):
    """Raised when a tierlist uuid does not resolve."""

    code = 'TIERLIST_NOT_FOUND'

    def __init__(self, tierlist_uuid: str) -> None:
        """Initialize TierlistNotFoundError.

        Args:
            tierlist_uuid: Identifier that was looked up.
        """
        self.tierlist_uuid = tierlist_uuid
        super().__init__(f"Couldn't get tierlist {tierlist_uuid}")


class BlobNotFoundError(NotFoundError):
    """Raised when an image blob or its metadata cannot be fetched."""

    code = 'IMAGE_NOT_FOUND'

    def __init__(self, file_key: str) -> None:
        """Initialize BlobNotFoundError.

        Args:
            file_key: Key that was looked up.
        """
        self.file_key = file_key
        super().__init__(f"Couldn't find image {file_key}")


# Store errors (either external store failed)


class StoreError(TierlistError):
    """Raised when the object store or the database fails."""

    code = 'STORE_ERROR'


class BlobWriteFailedError(StoreError):
    """Raised when writing an image to object storage fails."""

    code = 'BLOB_WRITE_FAILED'


class MetadataWriteFailedError(StoreError):
    """Raised when the entry row cannot be inserted after the blob write."""

    code = 'METADATA_WRITE_FAILED'


class DefaultTierCreationFailedError(StoreError):
    """Raised when one of the default tiers cannot be created."""

    code = 'DEFAULT_TIER_CREATION_FAILED'


class ReassignmentFailedError(StoreError):
    """Raised when an entry's tier reference cannot be updated."""

    code = 'REASSIGNMENT_FAILED'
