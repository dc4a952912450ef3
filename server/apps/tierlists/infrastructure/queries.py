"""Typed queries over the relational metadata store.

The aggregate tierlist query uses the database's own JSON aggregation,
so the structured columns come back in whatever representation the
backend produces: TEXT on SQLite, decoded lists on PostgreSQL.
Callers must normalize them (see ``logic.tierlist_operations``).
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Final, final

from django.db import IntegrityError, connections, transaction
from django.db.transaction import Atomic

from server.apps.tierlists.models import Entry, Tier, Tierlist

logger = logging.getLogger(__name__)

_SQLITE_ENTRY_OBJECT: Final = """
    json_object(
        'id', e.id,
        'tierlist_uuid', e.tierlist_uuid,
        'tier_id', e.tier_id,
        'file_key', e.file_key
    )
"""

_SQLITE_TIERLIST_QUERY: Final = f"""
SELECT
    tl.uuid,
    tl.name,
    (
        SELECT json_group_array(json_object(
            'id', t.id,
            'tierlist_uuid', t.tierlist_uuid,
            'name', t.name,
            'order', t."order",
            'entries', json((
                SELECT json_group_array({_SQLITE_ENTRY_OBJECT})
                FROM entries e
                WHERE e.tier_id = t.id
            ))
        ))
        FROM tiers t
        WHERE t.tierlist_uuid = tl.uuid
    ) AS tiers,
    (
        SELECT json_group_array({_SQLITE_ENTRY_OBJECT})
        FROM entries e
        WHERE e.tierlist_uuid = tl.uuid AND e.tier_id IS NULL
    ) AS unassigned_entries
FROM tierlists tl
WHERE tl.uuid = %s
"""

_POSTGRES_ENTRY_OBJECT: Final = """
    json_build_object(
        'id', e.id,
        'tierlist_uuid', e.tierlist_uuid,
        'tier_id', e.tier_id,
        'file_key', e.file_key
    )
"""

_POSTGRES_TIERLIST_QUERY: Final = f"""
SELECT
    tl.uuid,
    tl.name,
    COALESCE((
        SELECT json_agg(json_build_object(
            'id', t.id,
            'tierlist_uuid', t.tierlist_uuid,
            'name', t.name,
            'order', t."order",
            'entries', COALESCE((
                SELECT json_agg({_POSTGRES_ENTRY_OBJECT} ORDER BY e.id)
                FROM entries e
                WHERE e.tier_id = t.id
            ), '[]'::json)
        ) ORDER BY t."order", t.id)
        FROM tiers t
        WHERE t.tierlist_uuid = tl.uuid
    ), '[]'::json) AS tiers,
    COALESCE((
        SELECT json_agg({_POSTGRES_ENTRY_OBJECT} ORDER BY e.id)
        FROM entries e
        WHERE e.tierlist_uuid = tl.uuid AND e.tier_id IS NULL
    ), '[]'::json) AS unassigned_entries
FROM tierlists tl
WHERE tl.uuid = %s
"""

# Below the 999 bound parameters allowed by older SQLite builds
_KEY_LOOKUP_CHUNK_SIZE: Final = 900

_AGGREGATE_QUERIES: Final = {
    'sqlite': _SQLITE_TIERLIST_QUERY,
    'postgresql': _POSTGRES_TIERLIST_QUERY,
}


@dataclass(frozen=True, slots=True)
class TierlistRow:
    """Raw aggregate row for one tierlist.

    ``tiers`` and ``unassigned_entries`` are either JSON text or
    already-structured lists, depending on the database backend.
    """

    uuid: str
    name: str
    tiers: object
    unassigned_entries: object


@final
class MetadataStore:
    """Typed CRUD operations for tierlists, tiers and entries."""

    def __init__(self, using: str = 'default') -> None:
        """Bind the store to a database alias.

        Args:
            using: Django database alias.
        """
        self.using = using

    def atomic(self) -> Atomic:
        """Open a transaction on the bound database.

        Returns:
            Context manager wrapping a database transaction.
        """
        return transaction.atomic(using=self.using)

    def create_tierlist(self, uuid: str, name: str) -> Tierlist:
        """Insert a tierlist row.

        Args:
            uuid: Identifier of the new tierlist.
            name: Display name.

        Returns:
            Created Tierlist instance.
        """
        return Tierlist.objects.using(self.using).create(uuid=uuid, name=name)

    def create_tier(self, tierlist_uuid: str, name: str, order: int) -> Tier:
        """Insert a tier row.

        Args:
            tierlist_uuid: Owning tierlist.
            name: Display name.
            order: Position within the tierlist.

        Returns:
            Created Tier instance.
        """
        return Tier.objects.using(self.using).create(
            tierlist_id=tierlist_uuid,
            name=name,
            order=order,
        )

    def create_entry(self, tierlist_uuid: str, file_key: str) -> Entry:
        """Insert an unassigned entry row.

        Args:
            tierlist_uuid: Owning tierlist.
            file_key: Blob key without the images prefix.

        Returns:
            Created Entry instance.

        Raises:
            IntegrityError: If the tierlist does not exist.
        """
        # SQLite checks foreign keys only on commit, fail early instead
        tierlists = Tierlist.objects.using(self.using)
        if not tierlists.filter(uuid=tierlist_uuid).exists():
            raise IntegrityError(f'Tierlist {tierlist_uuid} does not exist')
        return Entry.objects.using(self.using).create(
            tierlist_id=tierlist_uuid,
            file_key=file_key,
            tier=None,
        )

    def fetch_tierlist(self, tierlist_uuid: str) -> TierlistRow | None:
        """Fetch the aggregate record of a tierlist.

        Args:
            tierlist_uuid: Identifier to look up.

        Returns:
            Aggregate row, or None if the tierlist does not exist.
        """
        connection = connections[self.using]
        query = _AGGREGATE_QUERIES.get(connection.vendor)
        if query is None:
            return self._fetch_tierlist_orm(tierlist_uuid)

        with connection.cursor() as cursor:
            cursor.execute(query, [tierlist_uuid])
            row = cursor.fetchone()

        if row is None:
            return None
        uuid, name, tiers, unassigned_entries = row
        return TierlistRow(
            uuid=uuid,
            name=name,
            tiers=tiers,
            unassigned_entries=unassigned_entries,
        )

    def set_entry_tier(self, entry_id: int, tier_id: int | None) -> Entry | None:
        """Point an entry at a tier, or at no tier.

        A single UPDATE statement, so concurrent moves are last write wins.

        Args:
            entry_id: Entry to update.
            tier_id: Target tier, None for unassigned.

        Returns:
            Updated Entry, or None if no row matched.

        Raises:
            IntegrityError: If the target tier does not exist.
        """
        tiers = Tier.objects.using(self.using)
        if tier_id is not None and not tiers.filter(id=tier_id).exists():
            raise IntegrityError(f'Tier {tier_id} does not exist')
        entries = Entry.objects.using(self.using)
        updated = entries.filter(id=entry_id).update(tier_id=tier_id)
        if not updated:
            return None
        return entries.get(id=entry_id)

    def get_entry_tierlist_uuid(self, entry_id: int) -> str | None:
        """Look up the owning tierlist of an entry.

        Args:
            entry_id: Entry to look up.

        Returns:
            Tierlist uuid, or None if the entry does not exist.
        """
        return Entry.objects.using(self.using).filter(
            id=entry_id,
        ).values_list('tierlist_id', flat=True).first()

    def get_tier_tierlist_uuid(self, tier_id: int) -> str | None:
        """Look up the owning tierlist of a tier.

        Args:
            tier_id: Tier to look up.

        Returns:
            Tierlist uuid, or None if the tier does not exist.
        """
        return Tier.objects.using(self.using).filter(
            id=tier_id,
        ).values_list('tierlist_id', flat=True).first()

    def referenced_file_keys(self, file_keys: Iterable[str]) -> set[str]:
        """Return the subset of keys that some entry references.

        Keys are looked up in chunks so the IN list stays below the
        backend's bound parameter limit.

        Args:
            file_keys: Candidate file keys.

        Returns:
            Keys that are referenced by an entry.
        """
        candidates = list(file_keys)
        entries = Entry.objects.using(self.using)
        referenced: set[str] = set()
        for start in range(0, len(candidates), _KEY_LOOKUP_CHUNK_SIZE):
            chunk = candidates[start:start + _KEY_LOOKUP_CHUNK_SIZE]
            referenced.update(
                entries.filter(file_key__in=chunk).values_list(
                    'file_key',
                    flat=True,
                ),
            )
        return referenced

    def iter_entry_keys(self) -> Iterator[tuple[int, str]]:
        """Iterate over all entries' blob keys.

        Yields:
            Tuples of (entry_id, file_key).
        """
        yield from Entry.objects.using(self.using).order_by(
            'id',
        ).values_list('id', 'file_key').iterator()

    def _fetch_tierlist_orm(self, tierlist_uuid: str) -> TierlistRow | None:
        """Build the aggregate row with the ORM for other backends."""
        tierlist = Tierlist.objects.using(self.using).filter(
            uuid=tierlist_uuid,
        ).prefetch_related('tiers__entries').first()
        if tierlist is None:
            return None

        tiers = [
            {
                'id': tier.id,
                'tierlist_uuid': tier.tierlist_id,
                'name': tier.name,
                'order': tier.order,
                'entries': [entry.to_dict() for entry in tier.entries.all()],
            }
            for tier in tierlist.tiers.all()
        ]
        unassigned = Entry.objects.using(self.using).filter(
            tierlist_id=tierlist_uuid,
            tier__isnull=True,
        )
        return TierlistRow(
            uuid=tierlist.uuid,
            name=tierlist.name,
            tiers=tiers,
            unassigned_entries=[entry.to_dict() for entry in unassigned],
        )
