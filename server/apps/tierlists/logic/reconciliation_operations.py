"""Business logic for reconciling object storage with entry rows.

Uploads write the blob before the entry row, so a failed insert (or a
crash in between) can leave a blob nothing references. This sweep
deletes such orphans once they are older than a grace period, and
reports entries whose blob has gone missing without touching them.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from django.utils import timezone

from server.apps.tierlists.infrastructure.context import StoreContext
from server.apps.tierlists.infrastructure.metadata import (
    IMAGE_PREFIX,
    extract_file_key,
)

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    """Outcome of one reconciliation sweep."""

    orphan_keys: list[str] = field(default_factory=list)
    deleted_keys: list[str] = field(default_factory=list)
    failed_keys: list[str] = field(default_factory=list)
    missing_entry_ids: list[int] = field(default_factory=list)


def find_orphan_blobs(
    stores: StoreContext,
    older_than: datetime,
) -> list[str]:
    """List blob keys that no entry references.

    Args:
        stores: Store context.
        older_than: Only blobs last modified at or before this count.

    Returns:
        Full object keys of orphaned blobs, oldest first.
    """
    candidates = {
        object_key: last_modified
        for object_key, last_modified in stores.blobs.list_blobs(IMAGE_PREFIX)
        if last_modified <= older_than
    }
    referenced = stores.metadata.referenced_file_keys(
        extract_file_key(object_key) for object_key in candidates
    )
    orphans = [
        object_key
        for object_key in candidates
        if extract_file_key(object_key) not in referenced
    ]
    orphans.sort(key=lambda object_key: candidates[object_key])
    return orphans


def find_entries_without_blob(stores: StoreContext) -> list[int]:
    """List entries whose blob does not exist in object storage.

    Entries are read before the blobs are listed. An upload completing
    in between has its blob listed but its entry unread, so it is
    never reported as missing.

    Args:
        stores: Store context.

    Returns:
        IDs of entries pointing at missing blobs.
    """
    entry_keys = list(stores.metadata.iter_entry_keys())
    existing = {
        extract_file_key(object_key)
        for object_key, _ in stores.blobs.list_blobs(IMAGE_PREFIX)
    }
    return [
        entry_id
        for entry_id, file_key in entry_keys
        if file_key not in existing
    ]


def reconcile_blobs(
    stores: StoreContext,
    grace_period: timedelta,
    *,
    dry_run: bool = False,
    batch_size: int | None = None,
) -> ReconciliationReport:
    """Delete orphaned blobs and flag entries with missing blobs.

    Blobs younger than the grace period are skipped, so an upload
    between its blob write and its entry insert is never removed.

    Args:
        stores: Store context.
        grace_period: Minimum age of a blob before it may be deleted.
        dry_run: Report without deleting anything.
        batch_size: Maximum number of blobs to delete, None for no limit.

    Returns:
        ReconciliationReport describing what was found and done.
    """
    report = ReconciliationReport()
    cutoff = timezone.now() - grace_period

    report.orphan_keys = find_orphan_blobs(stores, cutoff)
    to_delete = report.orphan_keys
    if batch_size is not None:
        to_delete = to_delete[:batch_size]

    for object_key in to_delete:
        if dry_run:
            continue
        try:
            stores.blobs.delete(object_key)
        except Exception:
            # Already logged by the storage, keep sweeping
            report.failed_keys.append(object_key)
        else:
            report.deleted_keys.append(object_key)

    report.missing_entry_ids = find_entries_without_blob(stores)
    for entry_id in report.missing_entry_ids:
        logger.warning('Entry %d references a missing blob', entry_id)

    logger.info(
        'Reconciliation finished: %d orphans, %d deleted, %d failed, '
        '%d entries without blob',
        len(report.orphan_keys),
        len(report.deleted_keys),
        len(report.failed_keys),
        len(report.missing_entry_ids),
    )
    return report

