"""Dedup ledger: the set of event identities already processed.

Loaded once at startup and flushed after every tick. The set only grows;
there is no eviction, so its size tracks the total number of events ever
seen. Only the poll loop writes to it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dhr_notifier.errors.notifier_errors import PersistenceError
from dhr_notifier.storage.client import LEDGER_KEY

if TYPE_CHECKING:
    from collections.abc import Iterator

    from dhr_notifier.engine.events import EventIdentity
    from dhr_notifier.storage.client import StoreClient

logger = logging.getLogger(__name__)


class DedupLedger:
    """Set of processed ``EventIdentity`` keys backed by a ``StoreClient``.

    Usage::

        ledger = DedupLedger(store)
        await ledger.load()
        if not ledger.contains(identity.key):
            ...
            ledger.add(identity)
        await ledger.persist()
    """

    def __init__(self, store: StoreClient | None = None) -> None:
        self._store = store
        self._keys: set[str] = set()
        self._dirty = False

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._keys))

    def contains(self, key: str) -> bool:
        """Whether the identity *key* was already processed."""
        return key in self._keys

    def add(self, identity: EventIdentity | str) -> None:
        """Record an identity as processed (in memory until ``persist``)."""
        key = identity if isinstance(identity, str) else identity.key
        if key not in self._keys:
            self._keys.add(key)
            self._dirty = True

    async def load(self) -> None:
        """Replace the in-memory set with the stored one.

        Missing, unreadable or malformed storage yields an empty ledger.
        """
        if self._store is None:
            return
        try:
            data = await self._store.load(LEDGER_KEY)
        except PersistenceError as exc:
            logger.error("Could not load processed events, starting empty: %s", exc.message)
            data = None

        if data is None:
            keys: set[str] = set()
        elif isinstance(data, list):
            keys = {item for item in data if isinstance(item, str)}
        else:
            logger.error("Processed events store holds %s, starting empty", type(data).__name__)
            keys = set()

        self._keys = keys
        self._dirty = False
        logger.info("Loaded %d processed events", len(self._keys))

    async def persist(self) -> bool:
        """Write the set to storage if it changed since the last write.

        A failed write is logged; the in-memory set stays authoritative and
        the next call retries.
        """
        if self._store is None or not self._dirty:
            return True
        try:
            await self._store.save(LEDGER_KEY, sorted(self._keys))
        except PersistenceError as exc:
            logger.error("Could not save processed events: %s", exc.message)
            return False
        self._dirty = False
        return True
