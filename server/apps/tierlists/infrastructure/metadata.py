"""Blob key generation for uploaded images."""

import uuid
from typing import Final

from server.apps.tierlists.exceptions import MalformedFilenameError

IMAGE_PREFIX: Final = 'images/'


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Only the segment after the first dot counts as the extension, so
    'archive.tar.gz' gives 'tar'.

    Args:
        filename: Declared filename (e.g., 'Photo.PNG').

    Returns:
        Extension without dot, lowercase (e.g., 'png').

    Raises:
        MalformedFilenameError: If the filename has no extension.
    """
    segments = filename.split('.')
    if len(segments) < 2 or not segments[1]:
        raise MalformedFilenameError(filename)
    return segments[1].lower()


def generate_file_key(filename: str) -> str:
    """Generate a collision-resistant blob key for an upload.

    No existence check is made, UUID4 collisions are negligible.

    Args:
        filename: Declared filename of the upload.

    Returns:
        Key of the form '<uuid4>.<ext>'.

    Raises:
        MalformedFilenameError: If the filename has no extension.
    """
    extension = get_file_extension(filename)
    return f'{uuid.uuid4()}.{extension}'


def build_object_key(file_key: str) -> str:
    """Prefix a file key with the images folder.

    Args:
        file_key: Key returned by generate_file_key.

    Returns:
        Full object key (e.g., 'images/<uuid>.png').
    """
    return f'{IMAGE_PREFIX}{file_key}'


def extract_file_key(object_key: str) -> str:
    """Strip the images folder from a full object key.

    Args:
        object_key: Full object key (e.g., 'images/<uuid>.png').

    Returns:
        File key as stored on entries.
    """
    return object_key.removeprefix(IMAGE_PREFIX)


def is_valid_file_key(file_key: str) -> bool:
    """Check that a requested key cannot escape the images folder.

    Args:
        file_key: Key taken from a request path.

    Returns:
        True if the key is a plain file name, False otherwise.
    """
    return bool(file_key) and '/' not in file_key and '..' not in file_key
