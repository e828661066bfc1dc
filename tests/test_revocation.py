"""Tests for utils/revocation.py -- in-memory and database blacklist stores."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models import storage
from models.blacklisted_token import BlacklistedToken
from utils.revocation import DatabaseRevocationStore, InMemoryRevocationStore

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestInMemoryRevocationStore:
    def test_revoke_then_lookup(self):
        store = InMemoryRevocationStore()
        assert store.is_revoked("tok") is False
        store.revoke("tok")
        assert store.is_revoked("tok") is True
        assert store.is_revoked("other") is False

    def test_revoke_is_idempotent(self):
        store = InMemoryRevocationStore()
        store.revoke("tok")
        store.revoke("tok")
        assert len(store) == 1

    def test_prune_only_drops_expired(self):
        store = InMemoryRevocationStore()
        store.revoke("old", NOW - timedelta(hours=1))
        store.revoke("live", NOW + timedelta(hours=1))
        store.revoke("forever")
        assert store.prune_expired(NOW) == 1
        assert not store.is_revoked("old")
        assert store.is_revoked("live")
        assert store.is_revoked("forever")


class TestDatabaseRevocationStore:
    @pytest.fixture
    def store(self, app):
        with app.app_context():
            yield DatabaseRevocationStore(storage)

    def test_revoke_persists(self, store):
        store.revoke("tok-1", NOW)
        assert store.is_revoked("tok-1") is True
        assert store.is_revoked("tok-2") is False

    def test_revoke_twice_is_not_an_error(self, store):
        store.revoke("tok-1")
        store.revoke("tok-1")
        assert storage.get_session().query(BlacklistedToken).count() == 1

    def test_prune_only_drops_expired(self, store):
        store.revoke("old", NOW - timedelta(days=1))
        store.revoke("live", NOW + timedelta(days=1))
        store.revoke("forever")
        assert store.prune_expired(NOW) == 1
        assert not store.is_revoked("old")
        assert store.is_revoked("live")
        assert store.is_revoked("forever")

    def test_app_uses_database_store(self, app):
        assert isinstance(app.extensions["revocation_store"], DatabaseRevocationStore)

