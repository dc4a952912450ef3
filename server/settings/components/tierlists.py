"""Tierlist catalog settings."""

from server.settings.components import config

# API server host and port
TIERNOW_HOST = config('TIERNOW_HOST', default='0.0.0.0')  # noqa: S104
TIERNOW_PORT = config('TIERNOW_PORT', cast=int, default=5452)

# Uploads above this size are rejected before any store write (10 MiB)
TIERNOW_MAX_UPLOAD_BYTES = config(
    'TIERNOW_MAX_UPLOAD_BYTES',
    cast=int,
    default=10 * 1024 * 1024,
)

# Reject moving an entry into a tier of another tierlist
TIERNOW_STRICT_TIER_SCOPE = config(
    'TIERNOW_STRICT_TIER_SCOPE',
    cast=bool,
    default=False,
)

# Blobs younger than this are never treated as orphans
TIERNOW_ORPHAN_GRACE_MINUTES = config(
    'TIERNOW_ORPHAN_GRACE_MINUTES',
    cast=int,
    default=15,
)
