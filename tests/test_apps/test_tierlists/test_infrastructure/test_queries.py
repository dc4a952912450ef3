"""Tests for typed metadata queries."""

import pytest
from django.db import IntegrityError

from server.apps.tierlists.infrastructure import queries
from server.apps.tierlists.infrastructure.queries import MetadataStore
from server.apps.tierlists.models import Entry


@pytest.fixture
def metadata(db):
    """Metadata store on the default database.

    Returns:
        MetadataStore instance.
    """
    return MetadataStore()


def test_create_entry_unassigned(metadata, tierlist):
    """Test new entries start without a tier."""
    entry = metadata.create_entry(tierlist['uuid'], 'abc.png')

    assert entry.id is not None
    assert entry.tier_id is None
    assert entry.tierlist_id == tierlist['uuid']


def test_create_entry_unknown_tierlist(metadata):
    """Test entry insert fails for an unknown tierlist."""
    with pytest.raises(IntegrityError):
        metadata.create_entry('00000000-0000-4000-8000-000000000000', 'a.png')

    assert Entry.objects.count() == 0


def test_set_entry_tier(metadata, tierlist):
    """Test moving an entry returns the updated row."""
    entry = metadata.create_entry(tierlist['uuid'], 'abc.png')
    tier_id = tierlist['tiers'][0]['id']

    updated = metadata.set_entry_tier(entry.id, tier_id)

    assert updated is not None
    assert updated.tier_id == tier_id


def test_set_entry_tier_unknown_entry(metadata, tierlist):
    """Test no row matched returns None."""
    assert metadata.set_entry_tier(99999, None) is None


def test_set_entry_tier_unknown_tier(metadata, tierlist):
    """Test unknown target tier is an integrity error."""
    entry = metadata.create_entry(tierlist['uuid'], 'abc.png')

    with pytest.raises(IntegrityError):
        metadata.set_entry_tier(entry.id, 99999)


def test_fetch_tierlist_returns_text_on_sqlite(metadata, tierlist):
    """Test SQLite returns the aggregate columns as JSON text."""
    row = metadata.fetch_tierlist(tierlist['uuid'])

    assert row is not None
    assert row.name == 'Best snacks'
    assert isinstance(row.tiers, str)
    assert isinstance(row.unassigned_entries, str)


def test_fetch_tierlist_unknown(metadata):
    """Test unknown uuid returns None."""
    assert metadata.fetch_tierlist('missing') is None


def test_fetch_tierlist_orm_fallback(metadata, tierlist, monkeypatch):
    """Test backends without a JSON query get structured columns."""
    monkeypatch.setattr(queries, '_AGGREGATE_QUERIES', {})
    metadata.create_entry(tierlist['uuid'], 'abc.png')

    row = metadata.fetch_tierlist(tierlist['uuid'])

    assert row is not None
    assert [tier['name'] for tier in row.tiers] == ['S', 'A', 'B', 'C', 'D']
    assert [entry['file_key'] for entry in row.unassigned_entries] == [
        'abc.png',
    ]


def test_tier_and_entry_owners(metadata, tierlist):
    """Test ownership lookups used by strict reassignment."""
    entry = metadata.create_entry(tierlist['uuid'], 'abc.png')
    tier_id = tierlist['tiers'][0]['id']

    assert metadata.get_entry_tierlist_uuid(entry.id) == tierlist['uuid']
    assert metadata.get_tier_tierlist_uuid(tier_id) == tierlist['uuid']
    assert metadata.get_entry_tierlist_uuid(99999) is None
    assert metadata.get_tier_tierlist_uuid(99999) is None


def test_referenced_file_keys(metadata, tierlist):
    """Test only keys with an entry are reported."""
    metadata.create_entry(tierlist['uuid'], 'kept.png')

    referenced = metadata.referenced_file_keys(['kept.png', 'orphan.png'])

    assert referenced == {'kept.png'}
    assert list(metadata.iter_entry_keys())[0][1] == 'kept.png'
