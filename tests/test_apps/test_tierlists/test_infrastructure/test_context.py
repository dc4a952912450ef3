"""Tests for building the store context from settings."""

from server.apps.tierlists.infrastructure.context import build_store_context
from server.apps.tierlists.infrastructure.storage import ImageStorage


def test_build_store_context(settings):
    """Test policy values are read from settings."""
    settings.TIERNOW_MAX_UPLOAD_BYTES = 2048
    settings.TIERNOW_STRICT_TIER_SCOPE = True

    stores = build_store_context()

    assert isinstance(stores.blobs, ImageStorage)
    assert stores.blobs.bucket_name == 'tiernow'
    assert stores.metadata.using == 'default'
    assert stores.max_upload_bytes == 2048
    assert stores.strict_tier_scope
