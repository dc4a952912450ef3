"""Business logic for tierlist creation and assembly."""

import json
import logging
import uuid
from typing import Any, Final

from django.db import DatabaseError

from server.apps.tierlists.exceptions import (
    DefaultTierCreationFailedError,
    InvalidNameError,
    StoreError,
    TierlistNotFoundError,
)
from server.apps.tierlists.infrastructure.context import StoreContext
from server.apps.tierlists.models import Tier, Tierlist

DEFAULT_TIER_NAMES: Final = ('S', 'A', 'B', 'C', 'D')

_NAME_MAX_LENGTH: Final = 255

logger = logging.getLogger(__name__)


def validate_tierlist_name(name: object) -> str:
    """Check a requested tierlist name.

    Args:
        name: Name taken from the request body.

    Returns:
        The name, unchanged.

    Raises:
        InvalidNameError: If the name is not a non-blank string that fits.
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidNameError('Tierlist name must be a non-empty string')
    if len(name) > _NAME_MAX_LENGTH:
        raise InvalidNameError(
            f'Tierlist name must be at most {_NAME_MAX_LENGTH} characters',
        )
    return name


def create_tierlist(stores: StoreContext, name: object) -> dict[str, Any]:
    """Create a tierlist with the default S, A, B, C, D tiers.

    The tierlist row and its five tiers are written in one transaction,
    a failing tier insert leaves nothing behind.

    Args:
        stores: Store context.
        name: Display name.

    Returns:
        Tierlist payload with its tiers and no entries.

    Raises:
        InvalidNameError: If the name is rejected.
        DefaultTierCreationFailedError: If a default tier insert fails.
    """
    name = validate_tierlist_name(name)
    tierlist_uuid = str(uuid.uuid4())

    with stores.metadata.atomic():
        try:
            tierlist = stores.metadata.create_tierlist(tierlist_uuid, name)
        except DatabaseError as error:
            logger.exception('Failed to create tierlist: %s', tierlist_uuid)
            raise InvalidNameError(str(error)) from error

        tiers = []
        for order, tier_name in enumerate(DEFAULT_TIER_NAMES):
            logger.debug(
                'Creating default tier %s for tierlist %s',
                tier_name,
                tierlist_uuid,
            )
            try:
                tiers.append(
                    stores.metadata.create_tier(tierlist_uuid, tier_name, order),
                )
            except DatabaseError as error:
                logger.exception(
                    'Failed to create default tier %s for tierlist %s',
                    tier_name,
                    tierlist_uuid,
                )
                raise DefaultTierCreationFailedError(
                    'Error: Could not create default tier',
                ) from error

    logger.info('Tierlist created: %s (%s)', tierlist.name, tierlist.uuid)
    return _tierlist_payload(tierlist, tiers)


def normalize_structured(raw_value: object, column: str) -> list[Any]:
    """Resolve a JSON column that may arrive as text or as data.

    Args:
        raw_value: Column value as returned by the database driver.
        column: Column name, used in error messages.

    Returns:
        Decoded list.

    Raises:
        StoreError: If the value cannot be interpreted as a JSON list.
    """
    if raw_value is None:
        return []
    if isinstance(raw_value, (bytes, bytearray)):
        raw_value = raw_value.decode('utf-8')
    if isinstance(raw_value, str):
        try:
            raw_value = json.loads(raw_value)
        except json.JSONDecodeError as error:
            raise StoreError(f'Column {column} holds invalid JSON') from error
    if not isinstance(raw_value, list):
        raise StoreError(
            f'Column {column} holds {type(raw_value).__name__}, not a list',
        )
    return raw_value


def assemble_tierlist(
    stores: StoreContext,
    tierlist_uuid: str,
) -> dict[str, Any]:
    """Compose a tierlist with its tiers and unassigned entries.

    Both structured columns are normalized and re-shaped here, so the
    payload is identical whatever representation the database used.

    Args:
        stores: Store context.
        tierlist_uuid: Tierlist to assemble.

    Returns:
        Tierlist payload.

    Raises:
        TierlistNotFoundError: If the uuid does not resolve.
        StoreError: If a structured column cannot be decoded.
    """
    row = stores.metadata.fetch_tierlist(tierlist_uuid)
    if row is None:
        logger.info('Tierlist not found: %s', tierlist_uuid)
        raise TierlistNotFoundError(tierlist_uuid)

    tiers = [
        _tier_shape(tier)
        for tier in normalize_structured(row.tiers, 'tiers')
    ]
    tiers.sort(key=lambda tier: (tier['order'], tier['id']))
    unassigned = _entries_shape(
        normalize_structured(row.unassigned_entries, 'unassigned_entries'),
    )
    return {
        'uuid': row.uuid,
        'name': row.name,
        'tiers': tiers,
        'unassigned_entries': unassigned,
    }


def _entries_shape(entries: list[Any]) -> list[dict[str, Any]]:
    shaped = [
        {
            'id': entry['id'],
            'tierlist_uuid': entry['tierlist_uuid'],
            'tier_id': entry['tier_id'],
            'file_key': entry['file_key'],
        }
        for entry in entries
    ]
    shaped.sort(key=lambda entry: entry['id'])
    return shaped


def _tier_shape(tier: dict[str, Any]) -> dict[str, Any]:
    return {
        'id': tier['id'],
        'tierlist_uuid': tier['tierlist_uuid'],
        'name': tier['name'],
        'order': tier['order'],
        'entries': _entries_shape(
            normalize_structured(tier.get('entries'), 'tiers.entries'),
        ),
    }


def _tierlist_payload(
    tierlist: Tierlist,
    tiers: list[Tier],
) -> dict[str, Any]:
    return {
        'uuid': tierlist.uuid,
        'name': tierlist.name,
        'tiers': [
            {
                'id': tier.id,
                'tierlist_uuid': tier.tierlist_id,
                'name': tier.name,
                'order': tier.order,
                'entries': [],
            }
            for tier in tiers
        ],
        'unassigned_entries': [],
    }
