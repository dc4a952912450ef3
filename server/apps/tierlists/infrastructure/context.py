"""Explicit store context passed into every tierlist operation."""

from dataclasses import dataclass
from typing import final

from django.conf import settings
from django.core.files.storage import storages

from server.apps.tierlists.infrastructure.queries import MetadataStore
from server.apps.tierlists.infrastructure.storage import ImageStorage


@final
@dataclass(frozen=True, slots=True)
class StoreContext:
    """Capabilities and policy shared by all tierlist operations.

    Built once on startup by the app config. Tests build their own.
    """

    blobs: ImageStorage
    metadata: MetadataStore
    max_upload_bytes: int
    strict_tier_scope: bool = False


def build_store_context() -> StoreContext:
    """Create the store context from Django settings.

    Returns:
        StoreContext using the 'images' storage and default database.
    """
    return StoreContext(
        blobs=storages['images'],  # type: ignore[arg-type]
        metadata=MetadataStore(using='default'),
        max_upload_bytes=settings.TIERNOW_MAX_UPLOAD_BYTES,
        strict_tier_scope=settings.TIERNOW_STRICT_TIER_SCOPE,
    )
