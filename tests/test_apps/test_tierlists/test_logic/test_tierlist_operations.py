"""Tests for tierlist creation and assembly."""

import json

import pytest
from django.db import DatabaseError
from django.http import JsonResponse

from server.apps.tierlists.exceptions import (
    DefaultTierCreationFailedError,
    InvalidNameError,
    StoreError,
    TierlistNotFoundError,
)
from server.apps.tierlists.infrastructure import queries
from server.apps.tierlists.logic.entry_operations import move_entry
from server.apps.tierlists.logic.tierlist_operations import (
    assemble_tierlist,
    create_tierlist,
    normalize_structured,
)
from server.apps.tierlists.models import Tier, Tierlist


@pytest.mark.django_db
class TestCreateTierlist:
    """Tests for create_tierlist."""

    def test_creates_default_tiers(self, stores):
        """Test new tierlist gets S, A, B, C, D in order."""
        payload = create_tierlist(stores, 'X')

        assert payload['name'] == 'X'
        assert [tier['name'] for tier in payload['tiers']] == [
            'S', 'A', 'B', 'C', 'D',
        ]
        assert [tier['order'] for tier in payload['tiers']] == [0, 1, 2, 3, 4]
        assert all(tier['entries'] == [] for tier in payload['tiers'])
        assert payload['unassigned_entries'] == []

    def test_fetch_after_create(self, stores):
        """Test fetching a new tierlist shows five tiers and no entries."""
        payload = create_tierlist(stores, 'X')

        fetched = assemble_tierlist(stores, payload['uuid'])

        assert fetched == payload
        assert len(fetched['tiers']) == 5
        assert fetched['unassigned_entries'] == []

    def test_assigns_unique_uuid(self, stores):
        """Test each tierlist gets its own identifier."""
        first = create_tierlist(stores, 'X')
        second = create_tierlist(stores, 'X')

        assert first['uuid'] != second['uuid']
        assert len(first['uuid']) == 36

    @pytest.mark.parametrize('name', ['', '   ', None, 42, 'x' * 256])
    def test_invalid_name(self, stores, name):
        """Test rejected names create nothing."""
        with pytest.raises(InvalidNameError):
            create_tierlist(stores, name)

        assert Tierlist.objects.count() == 0

    def test_default_tier_failure_rolls_back(self, stores, monkeypatch):
        """Test a failing tier insert leaves no partial tierlist."""
        create_tier = stores.metadata.create_tier
        calls = []

        def flaky_create_tier(tierlist_uuid, name, order):
            calls.append(name)
            if name == 'B':
                raise DatabaseError('disk full')
            return create_tier(tierlist_uuid, name, order)

        monkeypatch.setattr(stores.metadata, 'create_tier', flaky_create_tier)

        with pytest.raises(DefaultTierCreationFailedError):
            create_tierlist(stores, 'X')

        assert calls == ['S', 'A', 'B']
        assert Tierlist.objects.count() == 0
        assert Tier.objects.count() == 0

    def test_tierlist_insert_failure(self, stores, monkeypatch):
        """Test a rejected tierlist insert is reported as invalid name."""
        def failing_create_tierlist(tierlist_uuid, name):
            raise DatabaseError('constraint failed')

        monkeypatch.setattr(
            stores.metadata,
            'create_tierlist',
            failing_create_tierlist,
        )

        with pytest.raises(InvalidNameError, match='constraint failed'):
            create_tierlist(stores, 'X')


@pytest.mark.django_db
class TestAssembleTierlist:
    """Tests for assemble_tierlist."""

    def test_unknown_uuid(self, stores):
        """Test unknown tierlist is not found."""
        with pytest.raises(TierlistNotFoundError):
            assemble_tierlist(stores, 'missing')

    def test_text_and_structured_columns_render_identically(
        self,
        stores,
        tierlist,
        monkeypatch,
    ):
        """Test both storage encodings produce byte-identical JSON."""
        first = stores.metadata.create_entry(tierlist['uuid'], 'a.png')
        stores.metadata.create_entry(tierlist['uuid'], 'b.png')
        move_entry(stores, first.id, tierlist['tiers'][1]['id'])

        # SQLite aggregate: columns arrive as JSON text
        from_text = assemble_tierlist(stores, tierlist['uuid'])
        assert isinstance(
            stores.metadata.fetch_tierlist(tierlist['uuid']).tiers,
            str,
        )

        # ORM aggregate: columns arrive as Python lists
        monkeypatch.setattr(queries, '_AGGREGATE_QUERIES', {})
        from_structured = assemble_tierlist(stores, tierlist['uuid'])

        assert JsonResponse(from_text).content == (
            JsonResponse(from_structured).content
        )

    def test_tiers_sorted_by_order(self, stores, tierlist):
        """Test tiers come back in order even if created out of order."""
        stores.metadata.create_tier(tierlist['uuid'], 'F', -1)

        payload = assemble_tierlist(stores, tierlist['uuid'])

        assert [tier['name'] for tier in payload['tiers']] == [
            'F', 'S', 'A', 'B', 'C', 'D',
        ]


class TestNormalizeStructured:
    """Tests for normalize_structured."""

    def test_text_and_list_agree(self):
        """Test JSON text decodes to the same list as passed through."""
        structured = [{'id': 1, 'name': 'S'}]

        assert normalize_structured(json.dumps(structured), 'tiers') == (
            normalize_structured(structured, 'tiers')
        )

    def test_bytes(self):
        """Test bytes are decoded as UTF-8 JSON."""
        assert normalize_structured(b'[1, 2]', 'tiers') == [1, 2]

    def test_none_is_empty(self):
        """Test NULL columns become empty lists."""
        assert normalize_structured(None, 'tiers') == []

    def test_invalid_json(self):
        """Test undecodable text is a store error."""
        with pytest.raises(StoreError, match='invalid JSON'):
            normalize_structured('[not json', 'tiers')

    def test_not_a_list(self):
        """Test non-list values are a store error."""
        with pytest.raises(StoreError, match='not a list'):
            normalize_structured('{"id": 1}', 'tiers')
