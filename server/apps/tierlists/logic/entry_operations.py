"""Business logic for moving entries between tiers."""

import logging

from django.db import DatabaseError

from server.apps.tierlists.exceptions import (
    ReassignmentFailedError,
    TierScopeError,
)
from server.apps.tierlists.infrastructure.context import StoreContext
from server.apps.tierlists.models import Entry

logger = logging.getLogger(__name__)


def move_entry(
    stores: StoreContext,
    entry_id: int,
    tier_id: int | None,
) -> Entry:
    """Move an entry to a tier, or back to the unassigned set.

    By default the target tier is not checked against the entry's
    tierlist, so cross-tierlist moves succeed. With
    ``stores.strict_tier_scope`` such moves are rejected.

    Args:
        stores: Store context.
        entry_id: Entry to move.
        tier_id: Target tier, None for unassigned.

    Returns:
        Updated Entry instance.

    Raises:
        TierScopeError: If strict scope is on and the tier is foreign.
        ReassignmentFailedError: If the entry is unknown or the update fails.
    """
    if tier_id is None:
        logger.info('Moving entry %d to unassigned', entry_id)
    else:
        logger.info('Moving entry %d to tier %d', entry_id, tier_id)

    if stores.strict_tier_scope and tier_id is not None:
        _check_tier_scope(stores, entry_id, tier_id)

    try:
        entry = stores.metadata.set_entry_tier(entry_id, tier_id)
    except DatabaseError as error:
        logger.exception(
            'Failed to move entry %d to tier %s',
            entry_id,
            tier_id,
        )
        raise ReassignmentFailedError(
            'Error: Could not move image to tier',
        ) from error

    if entry is None:
        logger.warning('Entry not found for move: %d', entry_id)
        raise ReassignmentFailedError(
            'Error: Could not move image to tier',
        )
    return entry


def _check_tier_scope(
    stores: StoreContext,
    entry_id: int,
    tier_id: int,
) -> None:
    entry_tierlist = stores.metadata.get_entry_tierlist_uuid(entry_id)
    tier_tierlist = stores.metadata.get_tier_tierlist_uuid(tier_id)
    # Unknown entry or tier is reported by the update itself
    if entry_tierlist is None or tier_tierlist is None:
        return
    if entry_tierlist != tier_tierlist:
        logger.warning(
            'Rejected move of entry %d into tier %d of tierlist %s',
            entry_id,
            tier_id,
            tier_tierlist,
        )
        raise TierScopeError(entry_id, tier_id)
