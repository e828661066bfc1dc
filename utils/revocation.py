"""
Token revocation (logout blacklist).

A revoked token stays revoked: there is no un-revoke. Records are only
removed by prune_expired(), and only once the token could no longer pass
decoding anyway. Nothing calls it implicitly; see `flask prune-revoked-tokens`.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

logger = logging.getLogger("contentapi.revocation")


class RevocationStore(ABC):
    @abstractmethod
    def revoke(self, token: str, expires_at: Optional[datetime] = None) -> None:
        """Blacklist `token`. Revoking an already revoked token is a no-op."""

    @abstractmethod
    def is_revoked(self, token: str) -> bool:
        ...

    @abstractmethod
    def prune_expired(self, now: Optional[datetime] = None) -> int:
        """Drop records whose token expired before `now`; returns the count."""


class DatabaseRevocationStore(RevocationStore):
    """Durable store backed by the token_blacklist table."""

    def __init__(self, storage):
        self._storage = storage

    def revoke(self, token: str, expires_at: Optional[datetime] = None) -> None:
        if self._storage.record_revoked_token(token, expires_at):
            logger.info("token revoked (expires_at=%s)", expires_at)
        else:
            logger.debug("token already revoked")

    def is_revoked(self, token: str) -> bool:
        return self._storage.is_token_revoked(token)

    def prune_expired(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        count = self._storage.delete_revoked_tokens_before(now)
        logger.info("pruned %d expired blacklist records", count)
        return count


class InMemoryRevocationStore(RevocationStore):
    """Process-local store for tests and single-process tooling."""

    def __init__(self):
        self._lock = threading.Lock()
        self._tokens: Dict[str, Optional[datetime]] = {}

    def revoke(self, token: str, expires_at: Optional[datetime] = None) -> None:
        with self._lock:
            self._tokens.setdefault(token, expires_at)

    def is_revoked(self, token: str) -> bool:
        with self._lock:
            return token in self._tokens

    def prune_expired(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        with self._lock:
            stale = [t for t, exp in self._tokens.items() if exp is not None and exp < now]
            for t in stale:
                del self._tokens[t]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
