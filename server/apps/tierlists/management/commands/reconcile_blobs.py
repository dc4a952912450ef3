"""Management command to reconcile object storage with entry rows."""

import logging
from datetime import timedelta
from typing import Any

from django.apps import apps
from django.conf import settings
from django.core.management.base import BaseCommand

from server.apps.tierlists.logic.reconciliation_operations import (
    reconcile_blobs,
)

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Delete orphaned image blobs and report entries without a blob."""

    help = 'Delete blobs no entry references and flag entries with missing blobs'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=None,
            help='Max blobs to delete (default: no limit)',
        )
        parser.add_argument(
            '--grace-minutes',
            type=int,
            default=None,
            help='Skip blobs younger than this (default: from settings)',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the reconciliation command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        grace_minutes = options['grace_minutes']
        if grace_minutes is None:
            grace_minutes = settings.TIERNOW_ORPHAN_GRACE_MINUTES

        self.stdout.write(
            f'Looking for orphaned blobs older than {grace_minutes} minutes',
        )

        stores = apps.get_app_config('tierlists').stores
        report = reconcile_blobs(
            stores,
            timedelta(minutes=grace_minutes),
            dry_run=dry_run,
            batch_size=options['batch_size'],
        )

        for object_key in report.orphan_keys:
            if dry_run:
                self.stdout.write(f'Would delete: {object_key}')
        for object_key in report.failed_keys:
            self.stderr.write(f'Failed to delete {object_key}')
        for entry_id in report.missing_entry_ids:
            self.stderr.write(f'Entry {entry_id} has no blob')

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Would delete {len(report.orphan_keys)} orphaned blobs',
                ),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Deleted {len(report.deleted_keys)} orphaned blobs, '
                    f'{len(report.failed_keys)} failed',
                ),
            )
